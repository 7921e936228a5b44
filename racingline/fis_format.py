"""
Parser for MATLAB Fuzzy Inference System (.fis) files

Example::

    [System]
    Name='frl_mamdani1'
    Type='mamdani'
    NumInputs=2
    NumOutputs=1
    ...

    [Input1]
    Name='distance'
    Range=[-1 1]
    NumMFs=3
    MF1='left':'trapmf',[-1 -1 -0.5 0]

    [Rules]
    1 2, 3 (1) : 1
"""

import re
from pathlib import Path
from typing import Dict, List, Tuple, Union

from racingline.errors import FisFormatError
from racingline.inference import FuzzyInferenceSystem, Rule, Term, Variable
from racingline.membership import SUGENO_OUTPUT_TYPES, get_membership_function

_SECTION = re.compile(r"^\[(\w+)\]$")
_MF_LINE = re.compile(r"^MF(\d+)\s*=\s*'([^']*)'\s*:\s*'([^']*)'\s*,\s*\[([^\]]*)\]$")
_RULE_LINE = re.compile(r"^([^(]*)\(([^)]*)\)\s*:\s*(\d+)$")


def _parse_numbers(text: str, context: str) -> Tuple[float, ...]:
    try:
        return tuple(float(token) for token in text.replace(",", " ").split())
    except ValueError:
        raise FisFormatError(f"{context}: expected numbers, got '{text}'") from None


def _parse_value(raw: str) -> str:
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] == "'":
        return raw[1:-1]
    return raw


def _split_sections(text: str) -> List[Tuple[str, List[str]]]:
    sections: List[Tuple[str, List[str]]] = []
    for number, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("%") or line.startswith("#"):
            continue
        match = _SECTION.match(line)
        if match:
            sections.append((match.group(1), []))
        elif not sections:
            raise FisFormatError(f"line {number}: content before the first section")
        else:
            sections[-1][1].append(line)
    return sections


def _parse_int(keys: Dict[str, str], key: str, default: int, section: str) -> int:
    try:
        return int(keys.get(key, default))
    except ValueError:
        raise FisFormatError(f"[{section}]: {key} must be an integer, got '{keys[key]}'") from None


def _parse_keys(section: str, lines: List[str]) -> Tuple[Dict[str, str], List[str]]:
    """Split a section into key=value pairs and membership function lines"""
    keys: Dict[str, str] = {}
    mf_lines: List[str] = []
    for line in lines:
        if line.startswith("MF"):
            mf_lines.append(line)
            continue
        if "=" not in line:
            raise FisFormatError(f"[{section}]: malformed line '{line}'")
        key, value = line.split("=", 1)
        keys[key.strip()] = _parse_value(value)
    return keys, mf_lines


def _parse_variable(section: str, lines: List[str], is_output: bool, system_kind: str) -> Variable:
    keys, mf_lines = _parse_keys(section, lines)
    if "Name" not in keys:
        raise FisFormatError(f"[{section}]: missing Name")

    range_values = _parse_numbers(keys.get("Range", "").strip("[]"), f"[{section}] Range")
    if len(range_values) != 2:
        raise FisFormatError(f"[{section}]: Range must have two values")

    terms: List[Term] = []
    for line in mf_lines:
        match = _MF_LINE.match(line)
        if not match:
            raise FisFormatError(f"[{section}]: malformed membership function '{line}'")
        _, term_name, kind, raw_params = match.groups()
        params = _parse_numbers(raw_params, f"[{section}] {term_name}")
        if not (is_output and system_kind == "sugeno" and kind in SUGENO_OUTPUT_TYPES):
            get_membership_function(kind, params)
        terms.append(Term(term_name, kind, params))

    declared = _parse_int(keys, "NumMFs", len(terms), section)
    if declared != len(terms):
        raise FisFormatError(f"[{section}]: NumMFs={declared} but {len(terms)} defined")

    return Variable(keys["Name"], (range_values[0], range_values[1]), terms)


def _parse_rule(line: str, n_inputs: int, n_outputs: int) -> Rule:
    match = _RULE_LINE.match(line)
    if not match:
        raise FisFormatError(f"[Rules]: malformed rule '{line}'")
    indices, weight, connection = match.groups()

    if "," in indices:
        antecedent_text, consequent_text = indices.split(",", 1)
        antecedents = _parse_numbers(antecedent_text, "[Rules]")
        consequents = _parse_numbers(consequent_text, "[Rules]")
    else:
        # Older files omit the comma between antecedents and consequents
        values = _parse_numbers(indices, "[Rules]")
        antecedents, consequents = values[:n_inputs], values[n_inputs:]

    if len(antecedents) != n_inputs or len(consequents) != n_outputs:
        raise FisFormatError(f"[Rules]: rule '{line}' does not match {n_inputs} inputs/{n_outputs} outputs")
    weights = _parse_numbers(weight, "[Rules] weight")
    if len(weights) != 1:
        raise FisFormatError(f"[Rules]: rule '{line}' must have exactly one weight")

    return Rule(
        antecedents=tuple(int(v) for v in antecedents),
        consequents=tuple(int(v) for v in consequents),
        weight=weights[0],
        connection=int(connection),
    )


def parse_fis(text: str) -> FuzzyInferenceSystem:
    """
    Parse the text of a .fis file

    Args:
        text: File contents

    Returns:
        The inference system (not yet checked for readiness)

    Raises:
        FisFormatError: The text is not a well-formed FIS description
    """
    sections = _split_sections(text)
    by_name = dict(sections)
    if "System" not in by_name:
        raise FisFormatError("missing [System] section")

    system, _ = _parse_keys("System", by_name["System"])
    kind = system.get("Type", "mamdani").lower()
    n_inputs = _parse_int(system, "NumInputs", 0, "System")
    n_outputs = _parse_int(system, "NumOutputs", 0, "System")

    inputs = []
    for i in range(1, n_inputs + 1):
        section = f"Input{i}"
        if section not in by_name:
            raise FisFormatError(f"missing [{section}] section")
        inputs.append(_parse_variable(section, by_name[section], False, kind))

    outputs = []
    for i in range(1, n_outputs + 1):
        section = f"Output{i}"
        if section not in by_name:
            raise FisFormatError(f"missing [{section}] section")
        outputs.append(_parse_variable(section, by_name[section], True, kind))

    rules = [_parse_rule(line, n_inputs, n_outputs) for line in by_name.get("Rules", [])]
    declared_rules = _parse_int(system, "NumRules", len(rules), "System")
    if declared_rules != len(rules):
        raise FisFormatError(f"NumRules={declared_rules} but {len(rules)} defined")

    default_defuzz = "wtaver" if kind == "sugeno" else "centroid"
    return FuzzyInferenceSystem(
        name=system.get("Name", ""),
        kind=kind,
        inputs=inputs,
        outputs=outputs,
        rules=rules,
        and_method=system.get("AndMethod", "min"),
        or_method=system.get("OrMethod", "max"),
        imp_method=system.get("ImpMethod", "min"),
        agg_method=system.get("AggMethod", "max"),
        defuzz_method=system.get("DefuzzMethod", default_defuzz),
    )


def load_fis(path: Union[str, Path]) -> FuzzyInferenceSystem:
    """
    Load and parse a .fis file

    Raises:
        OSError: The file could not be read
        FisFormatError: The file is malformed
    """
    return parse_fis(Path(path).read_text(encoding="utf-8"))
