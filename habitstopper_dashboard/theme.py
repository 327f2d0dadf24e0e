import streamlit as st

THEME = {
    "bg_main": "#fafafa",
    "bg_card": "#ffffff",
    "border": "#f1f5f9",
    "text_main": "#1e293b",
    "text_soft": "#94a3b8",
    "success_bg": "#34d399",
    "success_text": "#ffffff",
    "failed_bg": "#cbd5e1",
    "failed_text": "#64748b",
    "none_bg": "#f1f5f9",
    "none_text": "#94a3b8",
    "today_ring": "#a7f3d0",
    "accent": "#059669",
}


def inject_theme_css() -> None:
    theme_vars_css = "\n".join(
        f"    --{key.replace('_', '-')}: {value};" for key, value in THEME.items()
    )
    st.markdown(
        "<style>\n:root {\n"
        + theme_vars_css
        + """
}

.stApp {
    background: var(--bg-main);
    color: var(--text-main);
}

.hero-title {
    font-weight: 300;
    text-align: center;
    color: var(--text-main);
}

.hs-brand {
    font-weight: 700;
    font-size: 20px;
    color: var(--accent);
}

.hs-calendar {
    background: var(--bg-card);
    border: 1px solid var(--border);
    border-radius: 24px;
    padding: 20px;
    max-width: 420px;
    margin: 0 auto;
}

.hs-calendar table {
    width: 100%;
    border-collapse: separate;
    border-spacing: 4px;
    text-align: center;
}

.hs-calendar th {
    font-size: 11px;
    font-weight: 700;
    color: var(--text-soft);
}

.hs-day {
    display: inline-flex;
    align-items: center;
    justify-content: center;
    width: 36px;
    height: 36px;
    border-radius: 50%;
    font-size: 13px;
    font-weight: 500;
}

.hs-day-success { background: var(--success-bg); color: var(--success-text); }
.hs-day-failed { background: var(--failed-bg); color: var(--failed-text); }
.hs-day-none { background: var(--none-bg); color: var(--none-text); }
.hs-day-today { box-shadow: 0 0 0 2px var(--bg-card), 0 0 0 4px var(--today-ring); }
</style>
""",
        unsafe_allow_html=True,
    )
