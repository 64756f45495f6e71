"""
Streamlit Frontend for the Tithe Wallet

Four views, selected from the sidebar:
- Painel: totals, goal progress, AI tip, quick entry forms
- Histórico: every income and tithe payment, with delete
- Análises: monthly chart and paid status per month
- Configurações: goal, theme, backup export/import, clear data

DESIGN PRINCIPLES:
1. Every number on screen comes from WalletService.summary()
2. Deletes and "clear all" need an explicit confirmation step
3. Failures of the quote or the AI tip never block the page
"""

import asyncio
import json
from datetime import date

import streamlit as st
import streamlit.components.v1 as components
from pydantic import ValidationError

from tithe_wallet.config import validate_all_settings
from tithe_wallet.ledger import BackupImportError
from tithe_wallet.orchestrator import (
    CLEAR_DATA_PROMPT,
    DELETE_PAYMENT_PROMPT,
    DELETE_TRANSACTION_PROMPT,
    PendingConfirmation,
    WalletService,
    create_app_components,
)


# Page configuration
st.set_page_config(
    page_title="Carteira da Prosperidade",
    page_icon="💰",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
        margin-top: 10px;
    }
    .advice-box {
        padding: 20px;
        background-color: #f3e8ff;
        border-radius: 10px;
        border-left: 5px solid #7c3aed;
        margin: 10px 0;
    }
    .tithe-box {
        padding: 20px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
</style>
""", unsafe_allow_html=True)

DARK_MODE_CSS = """
<style>
    .stApp { background-color: #0f172a; color: #e2e8f0; }
    .advice-box, .tithe-box { background-color: #1e293b; color: #e2e8f0; }
</style>
"""


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    return create_app_components()


def brl(value: float) -> str:
    """Format as Brazilian currency, e.g. R$ 1.234,56."""
    text = f"{value:,.2f}".replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {text}"


def speak(text: str):
    """Read text aloud in pt-BR with the browser's speech synthesis."""
    components.html(f"""
    <script>
        const utterance = new SpeechSynthesisUtterance({json.dumps(text)});
        utterance.lang = "pt-BR";
        window.parent.speechSynthesis.cancel();
        window.parent.speechSynthesis.speak(utterance);
    </script>
    """, height=0)


def render_confirmation(confirmation: PendingConfirmation, on_answer):
    """
    Show the pending question with Sim/Cancelar.

    `on_answer` receives the confirm callback; the request is consumed
    either way, so the next delete asks again.
    """
    st.warning(confirmation.pending["prompt"])
    col1, col2 = st.columns(2)
    if col1.button("Sim", type="primary", key="confirm_yes"):
        on_answer(confirmation.resolve(True))
        st.rerun()
    if col2.button("Cancelar", key="confirm_no"):
        on_answer(confirmation.resolve(False))
        st.rerun()


def main():
    """Main application entry point."""
    wallet, poller, advice_agent = get_components()

    if wallet.data.dark_mode:
        st.markdown(DARK_MODE_CSS, unsafe_allow_html=True)

    st.sidebar.title("💰 Carteira da Prosperidade")
    st.sidebar.markdown("---")

    page = st.sidebar.radio(
        "Navegar para:",
        ["🏠 Painel", "📜 Histórico", "📊 Análises", "⚙️ Configurações"],
        index=0,
    )

    st.sidebar.markdown("---")
    rate = poller.latest
    st.sidebar.metric("Dólar (USD → BRL)", brl(rate.bid_value) if rate else "—")

    if wallet.last_save_error:
        st.sidebar.warning(f"Não foi possível salvar: {wallet.last_save_error}")

    if page == "🏠 Painel":
        render_dashboard_page(wallet, advice_agent)
    elif page == "📜 Histórico":
        render_history_page(wallet)
    elif page == "📊 Análises":
        render_analytics_page(wallet)
    elif page == "⚙️ Configurações":
        render_settings_page(wallet)


def render_dashboard_page(wallet: WalletService, advice_agent):
    """Render the dashboard."""
    st.title("🏠 Painel")
    summary = wallet.summary()

    col1, col2, col3 = st.columns(3)
    col1.metric("Total recebido", brl(summary.gross_total))
    col2.metric("Dízimo sugerido (10%)", brl(summary.suggested_tithe))
    col3.metric("Saldo líquido", brl(summary.net_balance))

    goal = wallet.data.prosperity_goal or 0.0
    st.markdown(f"### 🎯 Meta de prosperidade: {brl(goal)}")
    st.progress(max(0.0, summary.goal_progress) / 100)
    st.caption(f"{summary.goal_progress:.1f}% da meta")

    # AI tip
    st.markdown("### ✨ Conselho do dia")
    if st.button("🔄 Novo conselho") or "advice_loaded" not in st.session_state:
        with st.spinner("Buscando sabedoria financeira..."):
            run_async(advice_agent.get_advice(wallet.data.transactions))
        st.session_state.advice_loaded = True
    st.markdown(f"""
    <div class="advice-box">
        <p>{advice_agent.last_advice}</p>
    </div>
    """, unsafe_allow_html=True)
    if st.button("🔊 Ouvir conselho"):
        speak(advice_agent.last_advice)

    st.markdown("---")
    col1, col2 = st.columns(2)

    with col1:
        st.subheader("➕ Nova entrada")
        with st.form("income_form", clear_on_submit=True):
            amount = st.text_input("Valor (R$) *", placeholder="1.500,00")
            description = st.text_input("Descrição *", placeholder="Salário")
            received_on = st.date_input("Data", value=date.today())
            if st.form_submit_button("Adicionar", type="primary"):
                try:
                    wallet.add_transaction(amount, description, received_on)
                    st.session_state.pop("advice_loaded", None)
                    st.success("Entrada adicionada!")
                    st.rerun()
                except ValidationError:
                    st.error("Informe um valor positivo e uma descrição.")

    with col2:
        st.subheader("🙏 Registrar dízimo pago")
        with st.form("tithe_form", clear_on_submit=True):
            amount = st.text_input("Valor pago (R$) *")
            paid_on = st.date_input("Data do pagamento", value=date.today())
            if st.form_submit_button("Registrar"):
                try:
                    wallet.add_tithe_payment(amount, paid_on)
                    st.success("Pagamento registrado!")
                    st.rerun()
                except ValidationError:
                    st.error("Informe um valor positivo.")

    st.markdown("---")
    st.subheader("🕒 Entradas recentes")
    recent = wallet.recent()
    if not recent:
        st.info("Nenhuma entrada ainda. Adicione sua primeira receita acima.")
    for transaction in recent:
        st.markdown(f"**{transaction.description}** · {transaction.date} · {brl(transaction.amount)}")


def render_history_page(wallet: WalletService):
    """Render every record, with delete buttons."""
    st.title("📜 Histórico")

    confirmation = PendingConfirmation(st.session_state)

    st.subheader("Entradas")
    for transaction in reversed(wallet.data.transactions):
        col1, col2, col3, col4 = st.columns([4, 2, 2, 1])
        col1.markdown(f"**{transaction.description}**")
        col2.markdown(transaction.date)
        col3.markdown(brl(transaction.amount))
        if col4.button("🗑️", key=f"del_tx_{transaction.id}"):
            confirmation.request("delete_transaction", DELETE_TRANSACTION_PROMPT, transaction.id)
            st.rerun()
        if confirmation.is_pending("delete_transaction", transaction.id):
            render_confirmation(
                confirmation,
                lambda confirm, tid=transaction.id: wallet.delete_transaction(tid, confirm),
            )

    st.markdown("---")
    st.subheader("Pagamentos de dízimo")
    if not wallet.data.tithe_payments:
        st.info("Nenhum pagamento de dízimo registrado.")

    for payment in reversed(wallet.data.tithe_payments):
        col1, col2, col3 = st.columns([4, 4, 1])
        col1.markdown(payment.date)
        col2.markdown(brl(payment.amount))
        if col3.button("🗑️", key=f"del_tp_{payment.id}"):
            confirmation.request("delete_tithe_payment", DELETE_PAYMENT_PROMPT, payment.id)
            st.rerun()
        if confirmation.is_pending("delete_tithe_payment", payment.id):
            render_confirmation(
                confirmation,
                lambda confirm, pid=payment.id: wallet.delete_tithe_payment(pid, confirm),
            )


def render_analytics_page(wallet: WalletService):
    """Render monthly totals and paid status."""
    st.title("📊 Análises")
    summary = wallet.summary()

    if not summary.monthly:
        st.info("Adicione entradas para ver suas análises.")
        return

    col1, col2, col3 = st.columns(3)
    col1.metric("Média mensal", brl(summary.average_monthly))
    col2.metric("Projeção (12 meses)", brl(summary.projection))
    col3.metric("Dízimo já pago", brl(summary.tithe_paid_total))

    st.bar_chart(
        {
            "Mês": [month.label for month in summary.monthly],
            "Total": [month.total for month in summary.monthly],
            "Dízimo": [month.tithe for month in summary.monthly],
        },
        x="Mês",
    )

    st.subheader("Dízimo por mês")
    for month in summary.monthly:
        col1, col2, col3, col4 = st.columns([2, 2, 2, 2])
        col1.markdown(f"**{month.label}**")
        col2.markdown(brl(month.total))
        col3.markdown(f"Dízimo: {brl(month.tithe)}")
        if month.is_paid:
            col4.success("Pago")
        elif not month.can_mark_paid:
            col4.markdown("—")
        elif col4.button("Marcar como pago", key=f"pay_{month.key}"):
            try:
                wallet.mark_month_paid(month.key)
                st.rerun()
            except ValueError as e:
                col4.error(str(e))


def render_settings_page(wallet: WalletService):
    """Render preferences, backup and service status."""
    st.title("⚙️ Configurações")

    st.markdown("### 🎯 Meta de prosperidade")
    goal_value = st.number_input(
        "Meta (R$)",
        value=float(wallet.data.prosperity_goal or 0.0),
        min_value=0.0,
        step=100.0,
        format="%.2f",
    )
    if st.button("Salvar meta"):
        goal = wallet.set_goal(goal_value)
        st.success(f"Meta definida: {brl(goal)}")

    st.markdown("### 🌙 Aparência")
    if st.toggle("Modo escuro", value=wallet.data.dark_mode) != wallet.data.dark_mode:
        wallet.toggle_dark_mode()
        st.rerun()

    st.markdown("---")
    st.markdown("### 💾 Backup")
    filename, text = wallet.export_backup()
    st.download_button(
        "📥 Exportar dados",
        data=text,
        file_name=filename,
        mime="application/json",
    )

    uploaded_file = st.file_uploader("📤 Importar backup", type=["json"])
    if uploaded_file and st.button("Importar", type="primary"):
        try:
            imported = wallet.import_backup(uploaded_file.read())
            st.success(f"Dados importados: {len(imported.transactions)} entradas.")
        except BackupImportError as e:
            st.error(str(e))

    st.markdown("---")
    st.markdown("### ⚠️ Apagar todos os dados")
    confirmation = PendingConfirmation(st.session_state)
    if st.button("Apagar tudo"):
        confirmation.request("clear_all", CLEAR_DATA_PROMPT)
        st.rerun()
    if confirmation.is_pending("clear_all"):
        render_confirmation(confirmation, wallet.clear_all)

    st.markdown("---")
    st.markdown("### Status dos serviços")
    status = validate_all_settings()

    services = [
        ("Armazenamento", "storage"),
        ("Cotação do dólar", "exchange_rate"),
        ("Gemini (conselhos)", "gemini"),
    ]

    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name} - OK")
        else:
            error = status.get(f"{key}_error", "Não configurado")
            st.error(f"❌ {name} - {error}")


if __name__ == "__main__":
    main()
