"""Office Slacker (Streamlit)

UI/Experience

Principles:
- UI only renders + triggers.
- Core domain and engine are pure Python modules.
- The clock is virtual: every rerun advances the simulation by the real time elapsed since the last one.

Entry point: streamlit run app.py
"""

from __future__ import annotations

import time
from dataclasses import asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import streamlit as st

from core.rules import DEFAULT_RULES, get_rules
from core.state import state_to_dict

from engine.config import EngineConfig
from engine.logging import dumps_run_export
from engine.ports import AudioCue, ChoicePrompt, DailySummary, Ending, Notice, Snapshot, WeeklySummary
from engine.simulation import Simulation


APP_TITLE = "打工人模拟器"
APP_SUBTITLE = "敲键盘完成工作量，偷偷摸鱼回心情，别被老板抓到。"
APP_VERSION = "1.0.0"

MAX_STEP_MS = 5000  # at most 5 s of game time per rerun

st.set_page_config(page_title=APP_TITLE, page_icon="🐟", layout="wide", initial_sidebar_state="expanded")

CSS = """
<style>
.block-container {padding-top: 3.2rem; padding-bottom: 2rem;}
section[data-testid="stSidebar"] .block-container {padding-top: 2.0rem;}
.card {
  border: 1px solid rgba(255,255,255,0.08);
  border-radius: 16px;
  padding: 14px 16px;
  background: rgba(255,255,255,0.03);
}
.choice {
  border: 1px solid rgba(255,255,255,0.10);
  border-radius: 18px;
  padding: 18px 18px 14px 18px;
  background: rgba(255,255,255,0.02);
}
.pill {
  display: inline-block;
  padding: 2px 10px;
  border-radius: 999px;
  border: 1px solid rgba(255,255,255,0.12);
  font-size: 12px;
  opacity: .85;
}
.pill.warn {border-color: rgba(255,190,90,0.35);}
.pill.ok {border-color: rgba(120,255,160,0.25);}
.pill.bad {border-color: rgba(255,120,120,0.25);}
.boss {font-size: 42px; text-align: center;}
hr.soft {border: none; border-top: 1px solid rgba(255,255,255,0.08); margin: 1rem 0;}
.muted {opacity:.75;}
.small {font-size: 13px; opacity:.75;}
</style>
"""

st.markdown(CSS, unsafe_allow_html=True)


# =========================
# Presenter
# =========================


class SessionPresenter:
    """Keeps what the core announced so the next rerun can show it.

    Prompts, notices, summaries and the ending are read straight from the
    Simulation; this only collects the fire-and-forget parts.
    """

    def __init__(self) -> None:
        self.cues: List[Tuple[str, str]] = []
        self.transitions: List[Tuple[int, int]] = []
        self.last_snapshot: Optional[Snapshot] = None

    def render(self, snapshot: Snapshot) -> None:
        self.last_snapshot = snapshot

    def present_choice(self, prompt: ChoicePrompt) -> None:
        return None

    def present_notice(self, notice: Notice) -> None:
        return None

    def present_daily_summary(self, summary: DailySummary) -> None:
        return None

    def present_weekly_summary(self, summary: WeeklySummary) -> None:
        return None

    def present_ending(self, ending: Ending) -> None:
        return None

    def cue(self, cue: AudioCue) -> None:
        self.cues.append((datetime.now().strftime("%H:%M:%S"), cue.value))
        del self.cues[:-50]

    def play_day_transition(self, from_day: int, to_day: int) -> None:
        self.transitions.append((from_day, to_day))


# =========================
# Helpers
# =========================


def _now_id() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def _ensure_state() -> None:
    ss = st.session_state
    if "run_id" not in ss:
        ss.run_id = _now_id()
    if "rules_key" not in ss:
        ss.rules_key = "standard"
    if "base_seed" not in ss:
        ss.base_seed = 42
    if "presenter" not in ss:
        ss.presenter = SessionPresenter()
    if "sim" not in ss:
        ss.sim = None
    if "last_wall" not in ss:
        ss.last_wall = None


def _new_sim() -> None:
    ss = st.session_state
    cfg = EngineConfig(base_seed=int(ss.base_seed), rules_key=str(ss.rules_key))
    ss.presenter = SessionPresenter()
    ss.sim = Simulation(cfg, ss.presenter)
    ss.run_id = _now_id()
    ss.last_wall = None


def _start_run() -> None:
    ss = st.session_state
    if ss.sim is None:
        _new_sim()
    ss.sim.start()
    ss.last_wall = time.monotonic()


def _reset_run() -> None:
    ss = st.session_state
    if ss.sim is not None:
        ss.sim.reset_game()
    ss.last_wall = None


def _advance_clock(sim: Simulation) -> None:
    ss = st.session_state
    now = time.monotonic()
    if ss.last_wall is None:
        ss.last_wall = now
        return
    ms = int((now - ss.last_wall) * 1000)
    ms = max(0, min(ms, MAX_STEP_MS))
    ss.last_wall = now
    sim.advance(ms)


def _choose(branch: str) -> None:
    sim: Simulation = st.session_state.sim
    try:
        sim.choose(branch)
    except ValueError as e:
        # double click on an already resolved prompt
        st.toast(f"选择无效: {e}")


def _mood_pill(mood: float) -> str:
    if mood < 50:
        return "<span class='pill bad'>崩溃边缘</span>"
    if mood < 60:
        return "<span class='pill warn'>有点累</span>"
    return "<span class='pill ok'>状态不错</span>"


# =========================
# Pages
# =========================


def page_setup() -> None:
    st.title(APP_TITLE)
    st.caption(APP_SUBTITLE)
    c = st.container()
    with c:
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        st.markdown(
            "- 每天 240 秒，对应 09:00-18:00。\n"
            "- 敲满 400 下键盘完成当日工作（绩效10分）。\n"
            "- 摸鱼每2秒心情+1，但老板可能突然出现，及时关掉！\n"
            "- 每周五结算工资（1分=40元），扣房租800；每天生活费80。"
        )
        st.markdown("</div>", unsafe_allow_html=True)
        st.info("在左侧选择规则和种子，然后点「开始上班」。")


def _render_prompt(sim: Simulation, prompt: ChoicePrompt) -> None:
    st.markdown("<div class='choice'>", unsafe_allow_html=True)
    st.markdown(f"### {prompt.title}")
    st.write(prompt.description)
    if prompt.option_b is None:
        st.button(prompt.option_a, key=f"ack_{prompt.event_id}", on_click=_choose, args=("A",), use_container_width=True)
    else:
        a, b = st.columns(2)
        with a:
            st.button(prompt.option_a, key=f"a_{prompt.event_id}", on_click=_choose, args=("A",), use_container_width=True)
        with b:
            st.button(prompt.option_b, key=f"b_{prompt.event_id}", on_click=_choose, args=("B",), use_container_width=True)
    st.markdown("</div>", unsafe_allow_html=True)


def _render_summaries(sim: Simulation) -> None:
    daily = sim.daily_summary
    weekly = sim.weekly_summary
    if weekly is not None:
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        st.markdown("### 周结算（周五）")
        w1, w2, w3 = st.columns(3)
        w1.metric("本周绩效", f"{weekly.weekly_perf_total:.1f}")
        w2.metric("工资", f"{weekly.salary:.1f}")
        w3.metric("本周开支", f"{weekly.expenses:.1f}")
        st.markdown("</div>", unsafe_allow_html=True)
    if daily is not None:
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        st.markdown(f"### 第{daily.day}天 日结算")
        d1, d2, d3, d4 = st.columns(4)
        d1.metric("今日绩效", f"{daily.daily_perf:.1f}")
        d2.metric("今日心情", f"{daily.mood:.0f}")
        d3.metric("今日开支", f"{daily.expenses:.1f}")
        d4.metric("钱包", f"{max(0.0, daily.money):.1f}")
        st.markdown("</div>", unsafe_allow_html=True)
        label = "下一周" if daily.week_end else "下一天"
        st.button(label, key=f"next_{daily.day}", on_click=sim.proceed_next_day, type="primary", use_container_width=True)


@st.fragment(run_every=1.0)
def page_work() -> None:
    ss = st.session_state
    sim: Simulation = ss.sim
    if sim is None or not sim.state.started:
        # reset from inside the fragment: redraw the whole page
        st.rerun()
    _advance_clock(sim)
    snap = sim.snapshot()

    a, b, c, d = st.columns([1.0, 1.0, 1.2, 1.2])
    a.metric("日期", f"第{snap.day}天 · {snap.weekday}")
    b.metric("时间", snap.clock)
    c.metric("绩效", f"{snap.perf:.1f}")
    d.metric("钱包", f"{snap.money:.0f} 元")

    st.progress(min(1.0, snap.mood / 100.0), text=f"心情 {snap.mood:.0f}/100")
    st.markdown(_mood_pill(snap.mood), unsafe_allow_html=True)
    st.progress(snap.progress, text=f"工作进度 {int(snap.progress * 100)}%")

    st.markdown("<hr class='soft'/>", unsafe_allow_html=True)

    ending = sim.ending
    if ending is not None:
        if ending.kind == "good":
            st.success(f"🏁 {ending.message}")
        else:
            st.error(f"💀 {ending.message}")
        st.button("重新开始", on_click=_reset_run, type="primary")
        return

    if snap.day_ended:
        _render_summaries(sim)
        return

    notice = sim.pending_notice
    if notice is not None:
        box = {"warning": st.warning, "success": st.success}.get(notice.kind, st.info)
        box(f"**{notice.title}** {notice.message}")
        st.button("知道了", key="dismiss_notice", on_click=sim.dismiss_notice)

    prompt = sim.pending_prompt
    if prompt is not None:
        _render_prompt(sim, prompt)
        return

    if snap.boss_visible:
        st.markdown("<div class='boss'>👔 老板来了！</div>", unsafe_allow_html=True)

    k, f = st.columns(2)
    with k:
        st.button("⌨️ 敲键盘", on_click=sim.click_work, disabled=snap.paused, use_container_width=True)
    with f:
        if snap.is_fishing:
            st.button("🛑 关闭摸鱼", on_click=sim.close_fish, type="primary", use_container_width=True)
        else:
            st.button("🐟 摸鱼", on_click=sim.open_fish, disabled=snap.paused, use_container_width=True)


def page_history() -> None:
    ss = st.session_state
    st.title("记录")
    st.caption("本局的事件选择与每日结算。")

    logs: List[Dict[str, Any]] = list(ss.sim.run_log) if ss.sim is not None else []
    if not logs:
        st.info("还没有记录。")
        return

    for item in reversed(logs):
        kind = item.get("type")
        st.markdown("<div class='card'>", unsafe_allow_html=True)
        if kind == "choice":
            st.markdown(f"#### 第{item.get('day')}天 · {item.get('event_id')} → {item.get('branch')}: {item.get('label')}")
            if item.get("lottery_message"):
                st.markdown(item["lottery_message"])
        elif kind == "settlement":
            st.markdown(f"#### 第{item.get('day')}天 结算 · 绩效 {float(item.get('daily_perf', 0.0)):.1f}")
        elif kind == "ending":
            st.markdown(f"#### 结局 · {item.get('message')}")
        else:
            st.markdown(f"#### 第{item.get('day')}天 · {kind}")
        with st.expander("JSON"):
            st.json(item)
        st.markdown("</div>", unsafe_allow_html=True)
        st.write("")


def page_debug() -> None:
    ss = st.session_state
    st.title("Debug")
    sim: Optional[Simulation] = ss.sim

    st.subheader("EngineConfig")
    st.json(asdict(sim.config) if sim else {})

    st.subheader("GameState")
    st.json(state_to_dict(sim.state) if sim else {})

    st.subheader("Scheduler")
    st.code(repr(sim.scheduler) + "\n" + "\n".join(sim.scheduler.pending()) if sim else "")

    st.subheader("Audio cues")
    st.table([{"time": t, "cue": c} for t, c in reversed(ss.presenter.cues)])

    if sim is not None and sim.state.started and not sim.state.day_ended and not sim.state.game_ended:
        st.button("立即结束今天", on_click=sim.end_day_now)


# =========================
# Sidebar
# =========================


def export_controls() -> None:
    ss = st.session_state
    st.sidebar.markdown("---")
    st.sidebar.markdown("### Run Export")
    sim: Optional[Simulation] = ss.sim
    payload = sim.export_run() if sim else {}
    payload["meta"] = {
        "app": APP_TITLE,
        "version": APP_VERSION,
        "exported_at": datetime.utcnow().isoformat() + "Z",
    }
    st.sidebar.download_button(
        "下载本局记录",
        data=dumps_run_export(payload).encode("utf-8"),
        file_name=f"office_slacker_run_{ss.get('run_id', 'run')}.json",
        mime="application/json",
        disabled=sim is None,
    )


def sidebar() -> str:
    ss = st.session_state
    started = bool(ss.sim is not None and ss.sim.state.started)

    st.sidebar.markdown(f"**{APP_TITLE}**  ")
    st.sidebar.markdown(f"v{APP_VERSION}")

    st.sidebar.markdown("---")

    rule_keys = list(DEFAULT_RULES.keys())
    rule_ix = rule_keys.index(ss.rules_key) if ss.rules_key in rule_keys else 0
    new_key = st.sidebar.selectbox("规则", rule_keys, index=rule_ix, disabled=started)
    st.sidebar.caption(get_rules(new_key).desc)
    new_seed = st.sidebar.number_input("种子", value=int(ss.base_seed), step=1, disabled=started)
    if (new_key, int(new_seed)) != (ss.rules_key, int(ss.base_seed)):
        ss.rules_key, ss.base_seed = new_key, int(new_seed)
        ss.sim = None

    cols = st.sidebar.columns(2)
    with cols[0]:
        if st.button("开始上班", disabled=started, use_container_width=True):
            _start_run()
            st.rerun()
    with cols[1]:
        if st.button("重置", use_container_width=True):
            _reset_run()
            st.rerun()

    export_controls()

    st.sidebar.markdown("---")
    page = st.sidebar.radio("页面", ["上班", "记录", "Debug"], index=0)
    return page


# =========================
# Main
# =========================


def main() -> None:
    _ensure_state()
    page = sidebar()

    ss = st.session_state

    if page == "记录":
        page_history()
        return
    if page == "Debug":
        page_debug()
        return

    if ss.sim is None or not ss.sim.state.started:
        page_setup()
        return

    st.title(APP_TITLE)
    page_work()


if __name__ == "__main__":
    main()
