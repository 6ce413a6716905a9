# apps/streamlit_app/app.py
"""
DemandCast dashboard: paste CSV demand data, have the AI service evaluate a
set of forecasting models, generate a demand forecast, and ask for external
data sources that could improve it.

All state lives in st.session_state; the page never calls the operations
directly, only the actions in agent/actions.py (via DashboardState).
"""

import base64
import html
import sys
from pathlib import Path

import pandas as pd
import streamlit as st

# ---------- Setup ----------
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agent.actions import suggest_data_sources_action  # noqa: E402
from agent.dashboard_state import DashboardState, Notice  # noqa: E402
from agent.formatting import blocks_to_html, format_ai_response  # noqa: E402
from agent.schemas import SUPPORTED_MODELS  # noqa: E402
from demandcast.config import LLM_URL, configure_logging  # noqa: E402
from tools.visualization.plot_utils import plot_forecast_chart  # noqa: E402

configure_logging()

st.set_page_config(page_title="DemandCast", page_icon="⚡", layout="wide")
st.markdown("""
<style>
:root{ --card:#ffffffcc; --stroke:#d6e4f0; --text:#1f2937; --muted:#6b7280;
       --accent:#2563eb; --accent2:#0ea5e9; --chip:#e0f2fe; --chipstroke:#bae6fd; }
html, body, [data-testid="stAppViewContainer"]{
  background: radial-gradient(1200px 800px at 10% 10%, #f0f7ff 0%, #ffffff 55%) !important;
}
.small{ font-size:.95rem; } .muted{ color:var(--muted)!important; }
.hero{ background:linear-gradient(180deg,#e8f1ff 0%,#f5f9ff 100%);
       border:1px solid #cfe0fb; border-radius:20px; padding:22px 22px; margin-bottom:18px;}
.card{ background:var(--card); border:1px solid var(--stroke);
       border-radius:16px; padding:14px 16px; margin-bottom:10px;
       box-shadow:0 6px 20px rgba(37,99,235,.06); }
.card h4{ margin:0 0 6px 0; }
.kpi-title{ font-size:.85rem; font-weight:600; color:var(--muted); }
.kpi-value{ font-size:1.6rem; font-weight:700; }
.stButton>button{ background:linear-gradient(90deg,var(--accent),var(--accent2));
  color:white; border:none; border-radius:12px; font-weight:700; }
.badge{ display:inline-block; padding:5px 10px; border-radius:999px;
        background:var(--chip); border:1px solid var(--chipstroke); color:#075985;
        margin-right:6px; font-size:.85rem; }
.footer{ margin-top:32px; padding-top:12px; border-top:1px dashed var(--stroke); text-align:center; }
</style>
""", unsafe_allow_html=True)

PLACEHOLDER_CSV = """date,demand,temperature,humidity,is_holiday
2023-01-01,2500,5,80,1
2023-01-02,2800,6,82,0
2023-01-03,2900,4,78,0
2023-01-04,2750,7,85,0
2023-01-05,3100,8,88,0
2023-01-06,3200,9,90,0
2023-01-07,3000,7,86,0"""

DEFAULT_SELECTED = ("Linear Regression", "Random Forest")

SUGGESTER_DEFAULTS = {
    "city": "New York",
    "historicalDataDescription": "Hourly electricity demand from 2022-2023, with temperature and humidity.",
    "forecastAccuracyData": "Tried a simple linear regression model. RMSE is high during summer peaks. "
                            "Weather data seems to help but isn't capturing all variance.",
}

# ---------- Session ----------
if "dashboard" not in st.session_state:
    st.session_state["dashboard"] = DashboardState()
if "suggestion" not in st.session_state:
    st.session_state["suggestion"] = None
if "notice" not in st.session_state:
    st.session_state["notice"] = None

state: DashboardState = st.session_state["dashboard"]


# ---------- Helpers ----------
def flash(notice: Notice):
    """Keep a notice across st.rerun() so it is shown on the next pass."""
    st.session_state["notice"] = notice


def show_pending_notice():
    notice = st.session_state.get("notice")
    if notice is None:
        return
    st.session_state["notice"] = None
    icon = "⚠️" if notice.is_error else "✅"
    st.toast(f"**{notice.title}**: {notice.description}", icon=icon)


def card(title: str, body_html: str = "", subtitle: str = ""):
    sub = f"<div class='small muted'>{html.escape(subtitle)}</div>" if subtitle else ""
    st.markdown(f"<div class='card'><h4>{html.escape(title)}</h4>{sub}{body_html}</div>",
                unsafe_allow_html=True)


# ---------- Dashboard ----------
def render_kpis():
    kpis = state.kpis()
    cols = st.columns(4)
    for i, col in enumerate(cols):
        with col:
            if i < len(kpis):
                st.markdown(f"<div class='card'><div class='kpi-title'>{html.escape(kpis[i].title)}</div>"
                            f"<div class='kpi-value'>{kpis[i].value}</div></div>", unsafe_allow_html=True)
            elif not kpis:
                st.markdown("<div class='card'><div class='kpi-title'>KPI</div><div class='kpi-value'>...</div>"
                            "<div class='small muted'>Train a model to see metrics</div></div>",
                            unsafe_allow_html=True)


def render_data_import():
    card("1. Data Import", subtitle="Paste your historical electricity demand data in CSV format.")
    data = st.text_area("CSV data", PLACEHOLDER_CSV, height=200, key="csv_text",
                        placeholder="Paste CSV data here...", label_visibility="collapsed")
    if st.button("⬆️ Import Data", key="import_btn", use_container_width=True):
        flash(state.import_data(data))
        st.rerun()


def render_training():
    card("2. Model Training", subtitle="Select ML models and train them on your data.")
    disabled = not state.can_train
    selected = []
    cols = st.columns(2)
    for i, model in enumerate(SUPPORTED_MODELS):
        with cols[i % 2]:
            if st.checkbox(model, value=model in DEFAULT_SELECTED, key=f"model_{model}", disabled=disabled):
                selected.append(model)

    label = "Training..." if state.is_training else "🧠 Train Models"
    clicked = st.button(label, key="train_btn", use_container_width=True,
                        disabled=disabled or state.is_training or not selected)
    if clicked:
        with st.spinner("Training and evaluating models..."):
            flash(state.train(selected))
        st.rerun()

    rows = state.evaluation_rows()
    if rows:
        st.markdown("**Evaluation Results**")
        st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)
        comments = [r for r in state.training_results.results if r.comments]
        if comments:
            with st.expander("Model comments"):
                for r in comments:
                    st.markdown(f"- **{r.model_name}**: {r.comments}")


def render_chart():
    card("Forecast Visualization", subtitle="Predicted vs. Actual electricity demand for the next 7 days.")
    if state.chart_data:
        st.image(base64.b64decode(plot_forecast_chart(state.chart_data)), use_container_width=True)
        with st.expander("Chart data"):
            st.dataframe(pd.DataFrame([p.to_dict() for p in state.chart_data]), hide_index=True)
    else:
        st.info("Generate a forecast to see the chart.")


def render_forecast():
    card("3. Demand Forecasting", subtitle="Generate a demand forecast using a trained model.")
    trained = state.trained_models
    disabled = not state.can_forecast
    c1, c2 = st.columns([3, 1])
    with c1:
        model = st.selectbox("Trained model", trained, index=0 if trained else None,
                             placeholder="Select a trained model", key="forecast_model",
                             disabled=disabled or not trained, label_visibility="collapsed")
    with c2:
        label = "Forecasting..." if state.is_forecasting else "📈 Generate Forecast"
        clicked = st.button(label, key="forecast_btn", use_container_width=True,
                            disabled=disabled or state.is_forecasting or not model)
    if clicked:
        with st.spinner("Generating forecast..."):
            flash(state.forecast(model))
        st.rerun()

    out = state.forecast_output
    if out is not None:
        card("Forecast Explanation",
             f"<p><b>Forecast:</b></p><p>{html.escape(out.forecast)}</p>"
             f"<p><b>Influential Factors:</b></p><p>{html.escape(out.model_explanation)}</p>")


def render_dashboard():
    render_kpis()
    left, right = st.columns([1, 2], gap="large")
    with left:
        render_data_import()
        render_training()
    with right:
        render_chart()
        render_forecast()


# ---------- Data suggester ----------
def render_suggester():
    card("External Data Suggester",
         subtitle="Use AI to discover new external data sources that could improve your forecast accuracy.")
    with st.form("suggester_form"):
        city = st.text_input("City", SUGGESTER_DEFAULTS["city"], placeholder="e.g., San Francisco")
        description = st.text_area("Historical Data Description", SUGGESTER_DEFAULTS["historicalDataDescription"],
                                   help="Include time range, granularity, and any known issues.")
        accuracy = st.text_area("Forecast Accuracy Report (Optional)", SUGGESTER_DEFAULTS["forecastAccuracyData"],
                                help="This helps the AI give more tailored suggestions.")
        submitted = st.form_submit_button("💡 Get Suggestions")

    if submitted:
        problems = []
        if len(city.strip()) < 2:
            problems.append("City must be at least 2 characters.")
        if len(description.strip()) < 10:
            problems.append("Description must be at least 10 characters.")
        if problems:
            for p in problems:
                st.error(p)
        else:
            payload = {"city": city.strip(), "historicalDataDescription": description.strip()}
            if accuracy.strip():
                payload["forecastAccuracyData"] = accuracy.strip()
            st.session_state["suggestion"] = None
            with st.spinner("Asking the AI for data sources..."):
                result = suggest_data_sources_action(payload)
            if result.success:
                st.session_state["suggestion"] = result.data
                st.toast("**Suggestions Generated**: The AI has provided new data source ideas.", icon="✅")
            else:
                st.toast(f"**An Error Occurred**: {result.error}", icon="⚠️")

    suggestion = st.session_state["suggestion"]
    if suggestion is not None:
        card("Suggested Data Sources", blocks_to_html(format_ai_response(suggestion.suggested_data_sources)))
        card("AI Report", blocks_to_html(format_ai_response(suggestion.report)))


# ---------- Layout ----------
st.markdown("""
<div class="hero">
  <div style="font-size:26px;font-weight:700;">⚡ DemandCast</div>
  <div class="small muted" style="margin-top:4px;">
    AI-assisted electricity demand forecasting: import data, compare models, generate a forecast.
  </div>
</div>
""", unsafe_allow_html=True)

with st.sidebar:
    page = st.radio("View", ["Dashboard", "Data Suggester"], key="page")
    st.caption(f"AI service: {LLM_URL}")
    st.caption(f"Stage: {state.stage.value}")

show_pending_notice()

if page == "Dashboard":
    render_dashboard()
else:
    render_suggester()

# ---------- Footer ----------
st.markdown("""
<div class="footer">
  <span class="badge">Streamlit</span>
  <span class="badge">FastAPI LLM service</span>
  <div style="margin-top:6px" class="muted small">Metrics and forecasts are AI-generated text, not trained models.</div>
</div>
""", unsafe_allow_html=True)
