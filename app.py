import streamlit as st
import pandas as pd
import plotly.graph_objects as go
from datetime import datetime

from disruption_analyzer.aggregator import analyze_files
from disruption_analyzer.exceptions import EmptyInputError
from disruption_analyzer.logger import setup_logging
from disruption_analyzer.models import Level, MultiDocumentAnalysisResult

SESSION_KEY = "analysis"


def get_level_color(level: Level) -> str:
    if level == Level.LOW:
        return "#28a745"
    elif level == Level.MEDIUM:
        return "#ffc107"
    else:
        return "#dc3545"


def get_score_color(score: float) -> str:
    """Colour for a 0-10 score"""
    if score < 4:
        return "#28a745"
    elif score < 7:
        return "#ffc107"
    else:
        return "#dc3545"


def metric_card(title: str, value: str, color: str):
    st.markdown(f"""
    <div style="padding: 15px; border-radius: 8px; background-color: {color}20; border: 2px solid {color}">
        <h4 style="margin: 0; color: {color}">{title}</h4>
        <h2 style="margin: 5px 0; color: {color}">{value}</h2>
    </div>
    """, unsafe_allow_html=True)


def score_gauge(title: str, value: float) -> go.Figure:
    fig = go.Figure(go.Indicator(
        mode="gauge+number",
        value=value,
        title={'text': title},
        gauge={
            'axis': {'range': [0, 10]},
            'bar': {'color': get_score_color(value)},
            'steps': [
                {'range': [0, 4], 'color': '#e8f5e9'},
                {'range': [4, 7], 'color': '#fff8e1'},
                {'range': [7, 10], 'color': '#ffebee'},
            ],
        }
    ))
    fig.update_layout(height=250, margin=dict(l=20, r=20, t=50, b=20))
    return fig


def show_simulation_params(result: MultiDocumentAnalysisResult):
    params = result.combined_simulation_params
    st.header("🎯 Disruption Scenario")
    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("Site", params.site_id)
    with col2:
        st.metric("Disruption Type", params.disruption_type)
    with col3:
        metric_card("Severity", params.severity.value.upper(), get_level_color(params.severity))
    with col4:
        st.metric("Product", params.product or "-")


def show_protocol(result: MultiDocumentAnalysisResult):
    protocol = result.protocol_analysis
    st.header("📊 Protocol Complexity")

    gauge_cols = st.columns(4)
    gauges = [
        ("Overall Complexity", protocol.complexity),
        ("Procedure Complexity", protocol.cro.procedure_complexity),
        ("Patient Burden", protocol.cro.patient_burden),
        ("Visit Schedule", protocol.cro.visit_schedule.complexity),
    ]
    for col, (title, value) in zip(gauge_cols, gauges):
        with col:
            st.plotly_chart(score_gauge(title, value), use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        st.subheader("🚚 Logistics")
        st.markdown(f"**Storage:** {protocol.logistics.storage_conditions}")
        st.markdown(f"**Demand:** {protocol.logistics.estimated_demand.estimate}"
                    + (" (high)" if protocol.logistics.estimated_demand.high else ""))
        for requirement in protocol.logistics.supply_requirements:
            st.markdown(f"- {requirement}")
        for challenge in protocol.logistics.distribution_challenges:
            st.markdown(f"- ⚠️ {challenge}")
    with col2:
        st.subheader("🏥 Site Operations")
        schedule = protocol.cro.visit_schedule
        st.markdown(f"**Visits:** {schedule.visit_count} over {schedule.duration_weeks} weeks")
        st.markdown("**Staffing:** " + ", ".join(protocol.cro.staffing_requirements.staff))
        if protocol.protocol_challenges:
            st.markdown("**Protocol challenges:**")
            for challenge in protocol.protocol_challenges:
                st.markdown(f"- {challenge}")


def show_risks(result: MultiDocumentAnalysisResult):
    risk = result.risk_assessment
    st.header("⚠️ Risk Assessment")

    col1, col2 = st.columns([1, 2])
    with col1:
        metric_card("Risk Score", f"{risk.overall.risk_score:.2f} / 3", get_score_color(risk.overall.risk_score * 10 / 3))
    with col2:
        st.markdown(f"**{risk.overall.summary}**")
        for strategy in risk.overall.mitigation_strategies:
            st.markdown(f"- {strategy}")

    if risk.all_risks:
        risk_df = pd.DataFrame([r.to_dict() for r in risk.all_risks])
        st.dataframe(risk_df, use_container_width=True, hide_index=True)
    else:
        st.info("No risks identified")


def show_records(result: MultiDocumentAnalysisResult):
    data = result.extracted_data
    st.header("📋 Extracted Records")

    tables = {
        "Logistics": data.logistics,
        "Enrollment": data.enrollment,
        "Regulatory": data.regulatory,
        "Finance": data.finance,
    }
    tabs = st.tabs([f"{name} ({len(records)})" for name, records in tables.items()])
    for tab, (name, records) in zip(tabs, tables.items()):
        with tab:
            if records:
                st.dataframe(pd.DataFrame([r.to_dict() for r in records]), use_container_width=True,
                             hide_index=True)
            else:
                st.info(f"No {name.lower()} records found in the uploaded documents")

    keywords = result.keywords.to_dict()
    with st.expander("🔍 Keywords"):
        for name, values in keywords.items():
            st.markdown(f"**{name}:** " + (", ".join(values) if values else "-"))


def show_sources(result: MultiDocumentAnalysisResult):
    st.header("📁 Documents")
    for source in result.sources:
        with st.expander(f"{source.file_name} ({source.file_type.value}, {source.file_size} bytes)"):
            insights = source.sector_insights
            col1, col2 = st.columns(2)
            for col, (sector, lines) in zip([col1, col2, col1, col2], [
                ("Logistics", insights.logistics),
                ("CRO", insights.cro),
                ("Regulatory", insights.regulatory),
                ("Finance", insights.finance),
            ]):
                if lines:
                    with col:
                        st.markdown(f"**{sector}**")
                        for line in lines:
                            st.markdown(f"- {line}")
            st.text(source.extracted_content)

    for failure in result.metadata.skipped:
        st.warning(f"Skipped {failure.file_name}: {failure.reason}")


def main():
    st.set_page_config(
        page_title="Trial Disruption Analyzer",
        page_icon="🏥",
        layout="wide"
    )
    setup_logging()

    st.title("🏥 Clinical Trial Disruption Analyzer")
    st.markdown("""
    Upload protocol documents, inventory sheets and budget reports to derive a **disruption scenario**,
    **protocol complexity** and a **risk assessment** across all of them.
    """)

    st.sidebar.header("Upload Documents")
    uploaded_files = st.sidebar.file_uploader(
        "Choose files",
        type=['pdf', 'docx', 'xlsx', 'xls', 'txt', 'csv'],
        accept_multiple_files=True,
        help="Upload trial documents in PDF, Word, Excel or text format"
    )
    current = st.session_state.get(SESSION_KEY)
    add_to_current = st.sidebar.checkbox("Add to current analysis", value=False, disabled=current is None)

    if st.sidebar.button("Analyze", disabled=not uploaded_files):
        files = [(f.name, f.getvalue()) for f in uploaded_files]
        with st.spinner("Analyzing documents..."):
            try:
                st.session_state[SESSION_KEY] = analyze_files(
                    files, existing=current if add_to_current else None
                )
            except EmptyInputError as e:
                st.error(f"Could not extract text from any document: {e}")

    if st.sidebar.button("Clear analysis", disabled=current is None):
        st.session_state.pop(SESSION_KEY, None)

    result = st.session_state.get(SESSION_KEY)
    if result is None:
        st.info("👈 Upload one or more trial documents using the sidebar and press **Analyze** to begin.")
        return

    st.success(f"✅ {result.metadata.documents_analyzed} documents analyzed "
               f"({len(result.metadata.skipped)} skipped)")

    st.markdown("---")
    show_simulation_params(result)
    st.markdown("---")
    show_protocol(result)
    st.markdown("---")
    show_risks(result)
    st.markdown("---")
    show_records(result)
    st.markdown("---")
    show_sources(result)

    st.markdown("---")
    st.header("📥 Export")
    summary_df = pd.DataFrame([r.to_dict() for r in result.risk_assessment.all_risks])
    col1, col2 = st.columns(2)
    with col1:
        st.download_button(
            label="📄 Download Risks (CSV)",
            data=summary_df.to_csv(index=False),
            file_name=f"disruption_risks_{datetime.now().strftime('%Y%m%d')}.csv",
            mime="text/csv"
        )
    with col2:
        st.caption(f"Engine: {result.metadata.engine} v{result.metadata.version}")


if __name__ == "__main__":
    main()
