"""
Web application for the Fuzzy Racing Line simulation

Interactive dashboard to tune the control loop, compare inference engines
and query an engine by hand.
"""

from typing import Any, Dict, List

import dash
from dash import dcc, html, Input, Output, State
from dash.exceptions import PreventUpdate
import plotly.express as px
import plotly.graph_objs as go

from racingline import EngineId, LineMode, SimulationParams, SteeringLimits, load_engine_set
from racingline.analysis import COLUMN
from racingline.comparison import run_engine_comparison
from racingline.engines import ENGINE_CATALOG
from racingline.errors import EngineLoadError, RacingLineError
from racingline.geometry import command_ratio
from racingline.params import SPEED_MAX, SPEED_MIN
from racingline.simulator import RacingLineSimulator
from racingline.steering import SteeringLimiter


# Engines are loaded once at startup; a broken file only disables that engine
engines = load_engine_set()
manual_simulator = RacingLineSimulator(engines=engines)

ENGINE_OPTIONS = [
    {"label": ENGINE_CATALOG[engine_id].display_name, "value": engine_id.name}
    for engine_id in EngineId
]
LINE_MODE_OPTIONS = [
    {"label": "Sine Curve", "value": LineMode.PERIODIC.value},
    {"label": "Procedural Noise", "value": LineMode.NOISE_FIELD.value},
    {"label": "Manual", "value": LineMode.MANUAL.value},
]
LABEL_STYLE = {'fontWeight': 'bold', 'marginBottom': '5px'}
INPUT_STYLE = {'width': '100%', 'padding': '8px'}


def labelled(label: str, component: Any, width: str = '18%') -> html.Div:
    return html.Div(
        [html.Label(label, style=LABEL_STYLE), component],
        style={'width': width, 'display': 'inline-block', 'marginRight': '2%', 'verticalAlign': 'top'},
    )


def engine_status_rows() -> List[html.Tr]:
    rows = [html.Tr([html.Th("Engine"), html.Th("Status"), html.Th("Summary")])]
    for status in engines.status():
        info = ENGINE_CATALOG[status["id"]]
        state_text = "Ready" if status["ready"] else f"Not ready: {status['diagnostic']}"
        rows.append(html.Tr([
            html.Td(info.display_name),
            html.Td(state_text, style={"color": "green" if status["ready"] else "red"}),
            html.Td(info.summary),
        ]))
    return rows


# Initialize Dash app
app = dash.Dash(__name__)
app.title = "Fuzzy Logic - Racing Line"

# Define app layout
app.layout = html.Div([
    html.Div([
        html.H1("Fuzzy Logic - Racing Line",
                style={'textAlign': 'center', 'marginBottom': '30px'}),

        html.Div([
            html.H3("Inference Systems", style={'marginBottom': '15px'}),
            html.Table(engine_status_rows(),
                       style={'width': '100%', 'borderCollapse': 'collapse', 'fontSize': '14px'}),
        ], style={'marginBottom': '30px'}),

        html.Div([
            labelled("Fuzzy Inference Systems:", dcc.Checklist(
                id='engine-input',
                options=ENGINE_OPTIONS,
                value=[EngineId.MAMDANI_1.name, EngineId.SUGENO_1.name],
            ), width='22%'),
            labelled("Line Position Controller:", dcc.Dropdown(
                id='line-mode-input',
                options=LINE_MODE_OPTIONS,
                value=LineMode.PERIODIC.value,
                clearable=False,
            )),
            labelled("Car Speed (px/s):", dcc.Input(
                id='speed-input', type='number', value=250.0,
                min=SPEED_MIN, max=SPEED_MAX, step=0.1, style=INPUT_STYLE,
            ), width='12%'),
            labelled("Duration (s):", dcc.Input(
                id='duration-input', type='number', value=20.0,
                min=1.0, max=120.0, step=0.5, style=INPUT_STYLE,
            ), width='12%'),
            html.Button('Run Simulation', id='run-button',
                        style={'width': '18%', 'padding': '10px', 'fontSize': '16px',
                               'backgroundColor': '#4CAF50', 'color': 'white',
                               'border': 'none', 'borderRadius': '5px', 'cursor': 'pointer'}),
        ], style={'marginBottom': '15px'}),

        html.Div([
            labelled("Max Turn Vector X:", dcc.Input(
                id='max-x-input', type='number', value=0.75,
                min=0.001, max=0.75, step=0.001, style=INPUT_STYLE,
            ), width='15%'),
            labelled("Max Turn Vector Y:", dcc.Input(
                id='max-y-input', type='number', value=0.2,
                min=0.001, max=0.75, step=0.001, style=INPUT_STYLE,
            ), width='15%'),
            labelled("Distance Modifier:", dcc.Input(
                id='distance-mod-input', type='number', value=0.25,
                min=0.001, step=0.001, style=INPUT_STYLE,
            ), width='15%'),
            labelled("Velocity Modifier:", dcc.Input(
                id='velocity-mod-input', type='number', value=round(1 / 12, 4),
                min=0.001, step=0.001, style=INPUT_STYLE,
            ), width='15%'),
        ], style={'marginBottom': '30px', 'padding': '20px', 'backgroundColor': '#f5f5f5',
                  'borderRadius': '10px'}),

        html.Div(id='status-message', style={'marginBottom': '20px', 'fontSize': '14px'}),

        dcc.Loading(
            id="loading",
            type="default",
            children=[
                html.Div(id='results-container')
            ]
        ),

        html.Div([
            html.H3("Manual FIS Input", style={'marginBottom': '15px'}),
            html.P("Drag the inputs below to change the inputs to the Fuzzy Inference System"),
            labelled("Engine:", dcc.Dropdown(
                id='manual-engine-input',
                options=ENGINE_OPTIONS,
                value=EngineId.MAMDANI_1.name,
                clearable=False,
            ), width='25%'),
            html.Label("Distance From Racing Line", style=LABEL_STYLE),
            dcc.Slider(id='manual-distance-input', min=-1.0, max=1.0, step=0.001, value=0.0,
                       marks={-1: '-1', 0: '0', 1: '1'}),
            html.Label("Velocity Relative To Racing Line", style=LABEL_STYLE),
            dcc.Slider(id='manual-velocity-input', min=-1.0, max=1.0, step=0.001, value=0.0,
                       marks={-1: '-1', 0: '0', 1: '1'}),
            html.Div(id='manual-output', style={'fontSize': '16px', 'marginTop': '10px'}),
        ], style={'marginTop': '30px', 'padding': '20px', 'backgroundColor': '#f5f5f5',
                  'borderRadius': '10px'}),
    ], style={'maxWidth': '1400px', 'margin': '0 auto', 'padding': '20px'})
])


@app.callback(
    Output("manual-output", "children"),
    [
        Input("manual-engine-input", "value"),
        Input("manual-distance-input", "value"),
        Input("manual-velocity-input", "value"),
    ],
)
def update_manual_output(engine_name: str, distance: float, velocity: float) -> html.Div:
    """Query the chosen engine with the slider values"""
    engine_id = EngineId[engine_name]
    try:
        engines.require_ready(engine_id)
    except EngineLoadError as e:
        return html.Div(f"Engine not ready: {e}", style={"color": "red"})

    result = manual_simulator.manual_inference(distance or 0.0, velocity or 0.0, engine_id)
    if not result.ok:
        return html.Div(f"No direction ({result.fault.value})", style={"color": "red"})

    command = SteeringLimiter(manual_simulator.params.steering).limit(result.direction)
    ratio = command_ratio(command)
    ratio_text = "undefined (pointing straight)" if ratio is None else f"{ratio:.5f}"
    return html.Div([
        html.Div(f"Direction: {result.direction:.5f}"),
        html.Div(f"Command vector: ({command.x:.4f}, {command.y:.4f})"),
        html.Div(f"Dot/cross ratio: {ratio_text}"),
    ])


@app.callback(
    [Output("results-container", "children"), Output("status-message", "children")],
    [Input("run-button", "n_clicks")],
    [
        State("engine-input", "value"),
        State("line-mode-input", "value"),
        State("speed-input", "value"),
        State("duration-input", "value"),
        State("max-x-input", "value"),
        State("max-y-input", "value"),
        State("distance-mod-input", "value"),
        State("velocity-mod-input", "value"),
    ],
)
def update_results(
    n_clicks: int | None,
    engine_names: List[str],
    line_mode: str,
    speed: float,
    duration: float,
    max_x: float,
    max_y: float,
    distance_mod: float,
    velocity_mod: float,
) -> tuple[Any, Any]:
    """Run simulation and update results"""
    if n_clicks is None:
        raise PreventUpdate

    if not engine_names:
        return [], html.Div("Error: Select at least one inference system.", style={"color": "red"})
    if duration is None or duration <= 0 or duration > 120:
        return [], html.Div(
            "Error: Duration must be between 1 and 120 seconds.",
            style={"color": "red"},
        )

    try:
        params = SimulationParams(
            car_speed=speed,
            distance_modifier=distance_mod,
            velocity_modifier=velocity_mod,
            steering=SteeringLimits(max_x=max_x, max_y=max_y),
        )
        engine_ids = [EngineId[name] for name in engine_names]
        results = run_engine_comparison(
            engine_ids, LineMode(line_mode), duration=duration, params=params, engines=engines
        )
    except (RacingLineError, TypeError) as e:
        return [], html.Div(f"Error: {e}", style={"color": "red"})

    status_msg = html.Div(
        f"Simulation complete! Compared {len(engine_ids)} inference systems.",
        style={"color": "green"},
    )
    return create_results_layout(results), status_msg


def create_results_layout(results: Dict[EngineId, Dict[str, Any]]) -> html.Div:
    """Create the results visualization layout"""
    ready = [engine_id for engine_id, data in results.items() if data["ready"]]
    colors = px.colors.qualitative.Set1

    # 1. Line and vehicle position over time
    fig1 = go.Figure()
    if ready:
        first = results[ready[0]]
        fig1.add_trace(
            go.Scatter(
                x=first["time"],
                y=first["history"][:, COLUMN["line_x"]],
                mode="lines",
                name="Racing line",
                line=dict(color="black", width=2, dash="dash"),
            )
        )
    for i, engine_id in enumerate(ready):
        data = results[engine_id]
        fig1.add_trace(
            go.Scatter(
                x=data["time"],
                y=data["history"][:, COLUMN["position"]],
                mode="lines",
                name=data["name"],
                line=dict(color=colors[i % len(colors)], width=2),
                hovertemplate=f"{data['name']}<br>Time: %{{x:.2f}}s<br>Position: %{{y:.1f}}px<extra></extra>",
            )
        )

    fig1.update_layout(
        title="Line and Car Position Over Time",
        xaxis_title="Time (s)",
        yaxis_title="Lateral Position (px)",
        hovermode="closest",
        height=400,
        template="plotly_white",
    )

    # 2. Heading over time
    fig2 = go.Figure()
    for i, engine_id in enumerate(ready):
        data = results[engine_id]
        fig2.add_trace(
            go.Scatter(
                x=data["time"],
                y=data["history"][:, COLUMN["heading"]],
                mode="lines",
                name=data["name"],
                line=dict(color=colors[i % len(colors)], width=2),
                hovertemplate=f"{data['name']}<br>Time: %{{x:.2f}}s<br>Heading: %{{y:.2f}}°<extra></extra>",
            )
        )

    fig2.update_layout(
        title="Car Heading Over Time",
        xaxis_title="Time (s)",
        yaxis_title="Heading (degrees)",
        hovermode="closest",
        height=400,
        template="plotly_white",
    )

    # 3. Phase plot of the controller inputs
    fig3 = go.Figure()
    for i, engine_id in enumerate(ready):
        data = results[engine_id]
        fig3.add_trace(
            go.Scatter(
                x=data["history"][:, COLUMN["normalized_offset"]],
                y=data["history"][:, COLUMN["normalized_velocity"]],
                mode="lines",
                name=data["name"],
                line=dict(color=colors[i % len(colors)], width=2),
            )
        )

    fig3.update_layout(
        title="Phase Plot: Normalised Distance vs Velocity",
        xaxis_title="Distance (normalised)",
        yaxis_title="Velocity (normalised)",
        hovermode="closest",
        height=400,
        template="plotly_white",
    )

    # 4. RMS offset by engine
    fig4 = go.Figure()
    names = [results[engine_id]["name"] for engine_id in ready]
    rms = [results[engine_id]["analysis"]["offset_rms"] for engine_id in ready]
    colors_bar = [
        "green" if results[engine_id]["analysis"]["is_tracking"] else "red" for engine_id in ready
    ]
    fig4.add_trace(
        go.Bar(
            x=names,
            y=rms,
            marker_color=colors_bar,
            text=[f"{r:.1f}px" for r in rms],
            textposition="outside",
        )
    )
    fig4.update_layout(
        title="RMS Distance From Line by Engine",
        xaxis_title="Engine",
        yaxis_title="RMS Offset (px)",
        height=400,
        template="plotly_white",
    )

    # Summary table
    table_rows = [
        html.Tr([
            html.Th("Engine"),
            html.Th("Tracking"),
            html.Th("RMS Offset (px)"),
            html.Th("Max Offset (px)"),
            html.Th("Max Heading (deg)"),
            html.Th("Oscillation Freq (Hz)"),
            html.Th("Faults"),
        ])
    ]
    for engine_id, data in results.items():
        if not data["ready"]:
            table_rows.append(html.Tr([
                html.Td(data["name"]),
                html.Td(f"Not ready: {data['diagnostic']}", colSpan=6, style={"color": "red"}),
            ]))
            continue
        analysis = data["analysis"]
        tracking = analysis["is_tracking"]
        table_rows.append(html.Tr([
            html.Td(data["name"]),
            html.Td("Yes" if tracking else "No",
                    style={"color": "green" if tracking else "red", "fontWeight": "bold"}),
            html.Td(f"{analysis['offset_rms']:.2f}"),
            html.Td(f"{analysis['offset_max']:.2f}"),
            html.Td(f"{analysis['heading_max']:.2f}"),
            html.Td(f"{analysis['oscillation_frequency']:.2f}"),
            html.Td(analysis["fault_count"]),
        ]))

    return html.Div([
        html.H2("Simulation Results", style={"marginTop": "30px", "marginBottom": "20px"}),
        html.Div([
            html.H3("Summary Table", style={"marginBottom": "15px"}),
            html.Table(
                table_rows,
                style={
                    "width": "100%",
                    "borderCollapse": "collapse",
                    "marginBottom": "30px",
                    "fontSize": "14px",
                },
            ),
        ], style={"marginBottom": "30px"}),
        html.Div([
            html.Div([dcc.Graph(figure=fig1)], style={"marginBottom": "30px"}),
            html.Div([dcc.Graph(figure=fig2)], style={"marginBottom": "30px"}),
            html.Div([
                html.Div(
                    [dcc.Graph(figure=fig3)],
                    style={"width": "48%", "display": "inline-block", "marginRight": "2%"},
                ),
                html.Div(
                    [dcc.Graph(figure=fig4)],
                    style={"width": "48%", "display": "inline-block"},
                ),
            ], style={"marginBottom": "30px"}),
        ]),
    ])


if __name__ == "__main__":
    app.run(debug=True, port=8050)
