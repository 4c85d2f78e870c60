"""
Phish-Lens Email Analyzer - Streamlit Application

The host shell around the analysis core: sidebar settings, email selection
(uploaded .eml file or pasted text) and rendering of the published result.
Selecting a different email is an item-changed trigger; the Analyze button is
the manual trigger. One orchestrator lives in each browser session.

Run with: streamlit run src/app.py
"""

from typing import Dict

import streamlit as st

from analysis import AnalysisOrchestrator, AnalysisResult
from config import AnalyzerConfig, create_service
from email_processor import EmailProcessor, Mailbox, TextMailItem
from error_handling import ConfigError, error_handler
from llm_service import OllamaService
from risk_assessment import RiskTier, build_report

st.set_page_config(
    page_title="Phish-Lens Email Analyzer",
    page_icon="🎣",
    layout="wide"
)


def main():
    if 'mailbox' not in st.session_state:
        st.session_state.mailbox = Mailbox()
    if 'email_processor' not in st.session_state:
        st.session_state.email_processor = EmailProcessor()
    if 'selected_key' not in st.session_state:
        st.session_state.selected_key = None

    st.title("🎣 Phish-Lens Email Analyzer")
    st.caption("Phishing risk assessment of a single email by a language model")

    with st.sidebar:
        config = sidebar_config()

    orchestrator = get_orchestrator(config)
    if orchestrator is None:
        return

    col1, col2 = st.columns([2, 1])

    with col1:
        st.header("Email")
        select_email(st.session_state.mailbox)

        if st.button("🔍 Analyze", type="primary", disabled=st.session_state.mailbox.item is None):
            with st.spinner("Analyzing email..."):
                if orchestrator.start() is None:
                    st.info("An analysis is already running for this email.")

    with col2:
        st.header("Result")
        result = st.session_state.get("analysis_result")
        if result is None:
            st.write("Select an email and run the analysis.")
        else:
            display_result(result)


def sidebar_config() -> AnalyzerConfig:
    """Provider settings, seeded from the environment"""
    st.header("Configuration")
    try:
        defaults = AnalyzerConfig.from_env()
    except ConfigError as e:
        display_error(error_handler.handle_error(e, "Environment configuration"))
        defaults = AnalyzerConfig()

    provider = st.selectbox(
        "Provider", ["ollama", "gemini"],
        index=0 if defaults.provider != "gemini" else 1
    )
    model = st.text_input("Model Name", value=defaults.model or "",
                          help="Leave empty for the provider default")
    config = AnalyzerConfig(
        provider=provider,
        model=model.strip() or None,
        ollama_url=defaults.ollama_url,
        gemini_api_key=defaults.gemini_api_key,
        timeout=defaults.timeout,
        log_level=defaults.log_level,
    )

    if provider == "ollama":
        config.ollama_url = st.text_input("Ollama URL", value=defaults.ollama_url)
        if st.button("Test Connection", use_container_width=True):
            status = OllamaService(config.ollama_url, config.resolved_model).test_connection()
            if not status["connected"]:
                st.error(f"❌ Ollama Disconnected: {status.get('error')}")
            elif not status["model_available"]:
                st.warning(f"⚠️ Model '{config.resolved_model}' is not installed")
            else:
                st.success("✅ Connected")
    else:
        config.gemini_api_key = st.text_input(
            "Gemini API Key", value=defaults.gemini_api_key, type="password"
        )

    config.timeout = st.slider("Request Timeout (seconds)", 5, 180, min(max(defaults.timeout, 5), 180))

    error_stats = error_handler.get_error_statistics()
    if error_stats["total_errors"]:
        with st.expander(f"Errors this session ({error_stats['total_errors']})"):
            for error_type, count in error_stats["most_common_errors"]:
                st.markdown(f"• {error_type}: {count}")

    return config


def get_orchestrator(config: AnalyzerConfig):
    """Reuse the session's orchestrator while the configuration is unchanged"""
    if st.session_state.get("orchestrator_config") == config:
        return st.session_state.orchestrator

    try:
        service = create_service(config)
    except ConfigError as e:
        display_error(error_handler.handle_error(e, "Configuration"))
        return None

    previous = st.session_state.get("orchestrator")
    if previous is not None:
        previous.detach()

    orchestrator = AnalysisOrchestrator(st.session_state.mailbox, service, publish=store_result)
    orchestrator.attach()
    st.session_state.orchestrator = orchestrator
    st.session_state.orchestrator_config = config
    return orchestrator


def store_result(result: AnalysisResult):
    st.session_state.analysis_result = result


def select_email(mailbox: Mailbox):
    """Turn the current input into the selected item; a new selection triggers analysis"""
    input_method = st.radio(
        "Choose input method:",
        ["Upload .eml File", "Paste Email Text"],
        horizontal=True
    )

    if "Upload" in input_method:
        uploaded_file = st.file_uploader("Upload .eml file", type=['eml', 'txt'])
        if uploaded_file is None:
            return
        key = ("file", uploaded_file.name, uploaded_file.size)
        if key == st.session_state.selected_key:
            return
        item = st.session_state.email_processor.parse_bytes(uploaded_file.getvalue())
    else:
        sender = st.text_input("Sender address")
        subject = st.text_input("Subject")
        body = st.text_area("Email body", height=250)
        if not body.strip():
            return
        key = ("text", sender, subject, body)
        if key == st.session_state.selected_key:
            return
        item = TextMailItem(body, sender_address=sender.strip() or None, subject=subject)

    st.session_state.selected_key = key
    with st.spinner("Analyzing email..."):
        mailbox.select(item)


def display_result(result: AnalysisResult):
    if not result.succeeded:
        display_error(result.error or {"title": "⚠️ Analysis Failed", "message": result.message})
        st.write(result.message)
        return

    report = build_report(result.verdict)
    tier = result.risk_tier
    heading = f"**Risk Confidence Score:** {report['risk_tier']} {report['confidence_text']}"

    if tier is RiskTier.HIGH:
        st.error(f"🚨 {heading}")
    elif tier is RiskTier.MEDIUM:
        st.warning(f"⚠️ {heading}")
    else:
        st.success(f"✅ {heading}")

    if report["has_elements"]:
        st.markdown("### Suspicious Elements:")
        for i, element in enumerate(report["elements"], 1):
            st.text(f"{i}. {element}")
    else:
        st.text(report["elements_message"])

    st.markdown("### Reasoning")
    st.text(report["reasoning"])
    st.caption(f"Analysis #{result.generation} took {result.processing_time}s")


def display_error(error_info: Dict):
    """Display error information with troubleshooting guidance"""
    title = error_info.get("title", "⚠️ An error occurred")
    message = error_info.get("message", "")
    severity = error_info.get("severity", "medium")

    if severity in ("critical", "high"):
        st.error(f"**{title}**\n\n{message}")
    else:
        st.warning(f"**{title}**\n\n{message}")

    suggestions = error_info.get("suggestions", [])
    if suggestions:
        with st.expander("💡 Troubleshooting Steps"):
            for i, suggestion in enumerate(suggestions, 1):
                st.markdown(f"{i}. {suggestion}")


if __name__ == "__main__":
    main()
