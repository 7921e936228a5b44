"""
Fuzzy inference system evaluation (Mamdani and Sugeno)
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import numpy as np

from racingline.membership import MEMBERSHIP_FUNCTIONS, SUGENO_OUTPUT_TYPES

SYSTEM_TYPES = ("mamdani", "sugeno")
AND_METHODS = ("min", "prod")
OR_METHODS = ("max", "probor")
IMP_METHODS = ("min", "prod")
AGG_METHODS = ("max", "sum", "probor")
MAMDANI_DEFUZZ_METHODS = ("centroid", "bisector", "mom", "som", "lom")
SUGENO_DEFUZZ_METHODS = ("wtaver", "wtsum")

# MATLAB discretises output universes with 101 points
DEFAULT_RESOLUTION = 101


@dataclass
class Term:
    """A named membership function (or Sugeno output term) of a variable"""

    name: str
    kind: str
    params: Tuple[float, ...]

    def membership(self, x) -> np.ndarray:
        """Degree of membership of x (scalar or array)"""
        func, _ = MEMBERSHIP_FUNCTIONS[self.kind]
        return func(x, self.params)

    def sugeno_value(self, inputs: Sequence[float]) -> float:
        """Crisp output of a Sugeno term for the given crisp inputs"""
        if self.kind == "constant":
            return float(self.params[0])
        coefficients = np.asarray(self.params[:-1], dtype=float)
        return float(np.dot(coefficients, np.asarray(inputs, dtype=float)) + self.params[-1])


@dataclass
class Variable:
    """An input or output variable with its range and terms"""

    name: str
    range: Tuple[float, float]
    terms: List[Term] = field(default_factory=list)

    def clip(self, value: float) -> float:
        """Clip a crisp value to the variable range"""
        low, high = self.range
        return float(min(max(value, low), high))

    def fuzzify(self, value: float) -> np.ndarray:
        """Membership degree of value in every term, in term order"""
        return np.array([float(term.membership(value)) for term in self.terms])


@dataclass
class Rule:
    """
    A rule in MATLAB index form

    Antecedent/consequent entries are 1-based term indices; a negative index
    negates the term and 0 means the variable does not participate.
    """

    antecedents: Tuple[int, ...]
    consequents: Tuple[int, ...]
    weight: float = 1.0
    connection: int = 1  # 1 = AND, 2 = OR


class FuzzyInferenceSystem:
    """Evaluates a rule base against crisp inputs"""

    def __init__(
        self,
        name: str,
        kind: str,
        inputs: List[Variable],
        outputs: List[Variable],
        rules: List[Rule],
        and_method: str = "min",
        or_method: str = "max",
        imp_method: str = "min",
        agg_method: str = "max",
        defuzz_method: str = "centroid",
        resolution: int = DEFAULT_RESOLUTION,
    ) -> None:
        """
        Initialize inference system

        Args:
            name: System name
            kind: 'mamdani' or 'sugeno'
            inputs: Input variables, in rule column order
            outputs: Output variables, in rule column order
            rules: Rule base
            and_method: T-norm for AND connections
            or_method: S-norm for OR connections
            imp_method: Implication operator (Mamdani)
            agg_method: Aggregation operator (Mamdani)
            defuzz_method: Defuzzification method
            resolution: Number of points used to discretise output universes
        """
        self.name = name
        self.kind = kind.lower()
        self.inputs = inputs
        self.outputs = outputs
        self.rules = rules
        self.and_method = and_method
        self.or_method = or_method
        self.imp_method = imp_method
        self.agg_method = agg_method
        self.defuzz_method = defuzz_method
        self.resolution = resolution

    def input_index(self, name: str) -> Optional[int]:
        for i, variable in enumerate(self.inputs):
            if variable.name == name:
                return i
        return None

    def output_index(self, name: str) -> Optional[int]:
        for i, variable in enumerate(self.outputs):
            if variable.name == name:
                return i
        return None

    def check_ready(self) -> Tuple[bool, str]:
        """
        Check the system is complete and consistent

        Returns:
            Tuple of (ready, diagnostic); diagnostic is empty when ready
        """
        problems: List[str] = []

        if self.kind not in SYSTEM_TYPES:
            problems.append(f"unsupported system type '{self.kind}'")
        if not self.inputs:
            problems.append("no input variables")
        if not self.outputs:
            problems.append("no output variables")
        if not self.rules:
            problems.append("no rules")

        if self.and_method not in AND_METHODS:
            problems.append(f"unsupported AND method '{self.and_method}'")
        if self.or_method not in OR_METHODS:
            problems.append(f"unsupported OR method '{self.or_method}'")
        if self.kind == "mamdani":
            if self.imp_method not in IMP_METHODS:
                problems.append(f"unsupported implication method '{self.imp_method}'")
            if self.agg_method not in AGG_METHODS:
                problems.append(f"unsupported aggregation method '{self.agg_method}'")
            if self.defuzz_method not in MAMDANI_DEFUZZ_METHODS:
                problems.append(f"unsupported defuzzification method '{self.defuzz_method}'")
        elif self.kind == "sugeno" and self.defuzz_method not in SUGENO_DEFUZZ_METHODS:
            problems.append(f"unsupported defuzzification method '{self.defuzz_method}'")

        for variable in self.inputs + self.outputs:
            low, high = variable.range
            if not low < high:
                problems.append(f"variable '{variable.name}' has an empty range")
            if not variable.terms:
                problems.append(f"variable '{variable.name}' has no terms")

        for variable in self.inputs:
            for term in variable.terms:
                if term.kind not in MEMBERSHIP_FUNCTIONS:
                    problems.append(f"input term '{variable.name}.{term.name}' has type '{term.kind}'")
        for variable in self.outputs:
            for term in variable.terms:
                problems.extend(self._check_output_term(variable, term))

        for number, rule in enumerate(self.rules, start=1):
            problems.extend(self._check_rule(number, rule))

        return not problems, "; ".join(problems)

    def _check_output_term(self, variable: Variable, term: Term) -> List[str]:
        label = f"output term '{variable.name}.{term.name}'"
        if self.kind == "sugeno":
            if term.kind not in SUGENO_OUTPUT_TYPES:
                return [f"{label} must be constant or linear in a sugeno system"]
            expected = 1 if term.kind == "constant" else len(self.inputs) + 1
            if len(term.params) != expected:
                return [f"{label} expects {expected} parameters, got {len(term.params)}"]
        elif term.kind not in MEMBERSHIP_FUNCTIONS:
            return [f"{label} has type '{term.kind}'"]
        return []

    def _check_rule(self, number: int, rule: Rule) -> List[str]:
        problems: List[str] = []
        if len(rule.antecedents) != len(self.inputs):
            problems.append(f"rule {number} has {len(rule.antecedents)} antecedents")
        if len(rule.consequents) != len(self.outputs):
            problems.append(f"rule {number} has {len(rule.consequents)} consequents")
        if rule.connection not in (1, 2):
            problems.append(f"rule {number} has connection {rule.connection}")
        if not 0.0 <= rule.weight <= 1.0:
            problems.append(f"rule {number} has weight {rule.weight}")
        for index, variable in zip(rule.antecedents, self.inputs):
            if abs(index) > len(variable.terms):
                problems.append(f"rule {number} references missing term {index} of '{variable.name}'")
        for index, variable in zip(rule.consequents, self.outputs):
            if abs(index) > len(variable.terms):
                problems.append(f"rule {number} references missing term {index} of '{variable.name}'")
            if self.kind == "sugeno" and index < 0:
                problems.append(f"rule {number} negates a sugeno output term")
        return problems

    def evaluate(self, values: Sequence[float]) -> List[float]:
        """
        Run one inference pass

        Args:
            values: Crisp input values, in input order

        Returns:
            Crisp output values, in output order; NaN for an output no rule activates
        """
        crisp = [variable.clip(value) for variable, value in zip(self.inputs, values)]
        degrees = [variable.fuzzify(value) for variable, value in zip(self.inputs, crisp)]
        strengths = np.array([self._firing_strength(rule, degrees) for rule in self.rules])

        if self.kind == "sugeno":
            return [self._sugeno_output(o, strengths, crisp) for o in range(len(self.outputs))]
        return [self._mamdani_output(o, strengths) for o in range(len(self.outputs))]

    def _firing_strength(self, rule: Rule, degrees: List[np.ndarray]) -> float:
        terms: List[float] = []
        for index, input_degrees in zip(rule.antecedents, degrees):
            if index > 0:
                terms.append(input_degrees[index - 1])
            elif index < 0:
                terms.append(1.0 - input_degrees[-index - 1])

        if not terms:
            return rule.weight
        if rule.connection == 1:
            strength = min(terms) if self.and_method == "min" else float(np.prod(terms))
        elif self.or_method == "max":
            strength = max(terms)
        else:
            strength = 1.0 - float(np.prod([1.0 - t for t in terms]))
        return strength * rule.weight

    def _mamdani_output(self, output: int, strengths: np.ndarray) -> float:
        variable = self.outputs[output]
        universe = np.linspace(variable.range[0], variable.range[1], self.resolution)
        aggregated = np.zeros_like(universe)

        for rule, strength in zip(self.rules, strengths):
            index = rule.consequents[output]
            if index == 0:
                continue
            shape = variable.terms[abs(index) - 1].membership(universe)
            if index < 0:
                shape = 1.0 - shape
            if self.imp_method == "min":
                implied = np.minimum(strength, shape)
            else:
                implied = strength * shape

            if self.agg_method == "max":
                aggregated = np.maximum(aggregated, implied)
            elif self.agg_method == "sum":
                aggregated = aggregated + implied
            else:
                aggregated = aggregated + implied - aggregated * implied

        return defuzzify(universe, aggregated, self.defuzz_method)

    def _sugeno_output(self, output: int, strengths: np.ndarray, crisp: List[float]) -> float:
        variable = self.outputs[output]
        weights: List[float] = []
        levels: List[float] = []
        for rule, strength in zip(self.rules, strengths):
            index = rule.consequents[output]
            if index == 0:
                continue
            weights.append(strength)
            levels.append(variable.terms[index - 1].sugeno_value(crisp))

        total = float(np.sum(weights))
        if total == 0.0:
            return float("nan")
        weighted = float(np.dot(weights, levels))
        if self.defuzz_method == "wtsum":
            return weighted
        return weighted / total


def defuzzify(universe: np.ndarray, aggregated: np.ndarray, method: str) -> float:
    """
    Reduce an aggregated fuzzy set to a crisp value

    Args:
        universe: Discretised output universe
        aggregated: Aggregated membership over the universe
        method: centroid, bisector, mom, som or lom

    Returns:
        Crisp value, or NaN when the aggregated set is empty
    """
    total = float(np.sum(aggregated))
    if total == 0.0:
        return float("nan")

    if method == "centroid":
        return float(np.sum(universe * aggregated) / total)
    if method == "bisector":
        cumulative = np.cumsum(aggregated)
        return float(universe[np.argmax(cumulative >= total / 2)])

    peak = universe[aggregated == np.max(aggregated)]
    if method == "som":
        return float(np.min(peak))
    if method == "lom":
        return float(np.max(peak))
    return float(np.mean(peak))
