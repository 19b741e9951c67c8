from __future__ import annotations

import json
import time
import uuid

import pandas as pd
import streamlit as st

from core.assessment import MIN_SUBMIT_WORDS, count_words, result_grade, word_count_status
from core.attempt import (
    AttemptTiming,
    NextQuestion,
    PasteDetected,
    ScoreAttempt,
    SelectAnswer,
    StartAttempt,
    SubmitAssessment,
    Tick,
    UpdateScenarioResponse,
    create_attempt,
    transition,
)
from core.catalog import load_jobs, load_question_bank
from core.errors import AttemptTransitionError
from core.models import Job, UserProfile
from core.quality import calculate_quality_score, can_publish
from core.recommendations import rank_jobs
from core.settings import configure_logging, load_settings

APP_TITLE = "SalesFit Studio"
APP_SUBTITLE = "Passende Sales-Jobs, geprüfte Stellenanzeigen, Elite-Vertriebler-Assessment"
DEMO_USERNAME = "demo"
DEMO_PASSWORD = "demo"
ROLES = ["Closer", "Appointment Setter", "Account Executive", "Full Cycle", "Sales Consultant"]
SALES_CYCLES = ["", "1-7 Tage", "1-4 Wochen", "1-3 Monate", "3-6 Monate", "6+ Monate"]
LOCATION_MODES = ["", "remote", "hybrid", "onsite"]
CATEGORY_LABELS = {
    "empathy": "Empathie",
    "hostility_handling": "Feindseligkeit",
    "acquisition": "Akquise",
    "resilience": "Resilienz",
}
PROFILE_PRESETS = {
    "Lea - Closer aus Berlin": {
        "role_needed": "Closer",
        "avg_deal_eur": 20000,
        "location_city": "Berlin",
        "location_country": "Deutschland",
        "tools": ["HubSpot", "Zoom"],
    },
    "Jonas - Setter in Hamburg": {
        "role_needed": "Setter",
        "avg_deal_eur": 1000,
        "location_city": "Hamburg",
        "location_country": "Deutschland",
        "tools": ["Pipedrive"],
    },
    "Leeres Profil": {},
}


def ensure_state():
    if "authenticated" not in st.session_state:
        st.session_state["authenticated"] = False
    if "profile" not in st.session_state:
        st.session_state["profile"] = UserProfile.from_dict(PROFILE_PRESETS["Lea - Closer aus Berlin"])
    if "attempt" not in st.session_state:
        st.session_state["attempt"] = None
    if "last_tick" not in st.session_state:
        st.session_state["last_tick"] = None


def inject_styles():
    st.markdown(
        """
        <style>
        .hero-wrap {
            background: radial-gradient(circle at 20% 20%, #2563eb 0%, #1e3a8a 40%, #0f172a 100%);
            border-radius: 18px;
            padding: 28px;
            color: #f8fafc;
            margin-bottom: 18px;
        }
        .hero-title { font-size: 2.2rem; font-weight: 700; margin-bottom: 0.4rem; }
        .hero-sub { opacity: 0.92; font-size: 1.03rem; }
        </style>
        """,
        unsafe_allow_html=True,
    )


def try_login(username: str, password: str) -> bool:
    return username.strip().lower() == DEMO_USERNAME and password == DEMO_PASSWORD


def render_landing_page():
    st.markdown(
        f"""
        <div class="hero-wrap">
          <div class="hero-title">{APP_TITLE}</div>
          <div class="hero-sub">{APP_SUBTITLE}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )
    col1, col2, col3 = st.columns(3)
    col1.metric("Fit Score", "6 Dimensionen", "Rolle, Leads, Zyklus, Deal, Ort, Tools")
    col2.metric("Qualitätscheck", "100 Punkte", "Ab 70 veröffentlichbar")
    col3.metric("Assessment", "20 + 1", "Bestehen ab 16/27 Punkten")

    if st.session_state["authenticated"]:
        st.success("Angemeldet als demo. Wähle links einen Bereich.")
        return
    with st.form("landing_login_form"):
        user_in = st.text_input("Benutzername", value="demo")
        pass_in = st.text_input("Passwort", type="password", value="demo")
        if st.form_submit_button("Anmelden"):
            if try_login(user_in, pass_in):
                st.session_state["authenticated"] = True
                st.rerun()
            else:
                st.error("Ungültige Zugangsdaten.")


def render_job_matching(jobs: list[Job]):
    profile: UserProfile = st.session_state["profile"]
    with st.expander("Kandidatenprofil", expanded=True):
        with st.form("profile_form"):
            c1, c2 = st.columns(2)
            with c1:
                role = st.selectbox(
                    "Gesuchte Rolle",
                    [""] + ROLES,
                    index=([""] + ROLES).index(profile.role_needed) if profile.role_needed in ROLES else 0,
                )
                avg_deal = st.number_input("Ø Dealgröße (EUR)", min_value=0, value=int(profile.avg_deal_eur or 0), step=500)
                tools = st.text_input("Tools (kommagetrennt)", value=", ".join(profile.tools))
            with c2:
                city = st.text_input("Stadt", value=profile.location_city or "")
                country = st.text_input("Land", value=profile.location_country or "")
            if st.form_submit_button("Passende Jobs berechnen"):
                profile = UserProfile(
                    role_needed=role or None,
                    avg_deal_eur=int(avg_deal) or None,
                    location_city=city or None,
                    location_country=country or None,
                    tools=tuple(t.strip() for t in tools.split(",") if t.strip()),
                )
                st.session_state["profile"] = profile

    ranked = rank_jobs(profile, jobs)
    with st.expander("Empfohlene Jobs", expanded=True):
        table = pd.DataFrame(
            [
                {
                    "Job": job.title or job.id,
                    "Fit": result.score,
                    "Band": result.band,
                    "Gründe": " · ".join(result.reasons),
                }
                for job, result in ranked
            ]
        )
        st.dataframe(table, hide_index=True, use_container_width=True)
        if ranked:
            best_job, best = ranked[0]
            st.markdown(f"**Aufschlüsselung für {best_job.title or best_job.id}**")
            st.bar_chart(pd.DataFrame({"Score": best.breakdown.as_dict()}))


def render_job_quality():
    with st.form("quality_form"):
        c1, c2 = st.columns(2)
        with c1:
            title = st.text_input("Titel", value="Senior Sales Closer (m/w/d)")
            role = st.selectbox("Rolle", [""] + ROLES, index=1)
            seniority = st.selectbox("Seniorität", ["", "Junior", "Mid", "Senior"], index=3)
            industries = st.multiselect("Branchen", ["Energie", "SaaS", "Versicherung", "Immobilien", "Industrie"], default=["Energie"])
            leads_type = st.selectbox("Lead-Typ", ["", "warm", "cold", "mixed"], index=1)
        with c2:
            cycle = st.selectbox("Sales-Zyklus", SALES_CYCLES, index=2)
            commission = st.number_input("Provision (%)", min_value=0.0, max_value=100.0, value=8.0)
            hours = st.number_input("Stunden/Woche", min_value=0, max_value=60, value=40)
            employment = st.selectbox("Anstellungsart", ["", "Vollzeit", "Teilzeit", "Freelance"], index=3)
            mode = st.selectbox("Arbeitsort", LOCATION_MODES, index=1)
        description = st.text_area("Beschreibung (Markdown)", height=160)
        submitted = st.form_submit_button("Qualität prüfen")

    if not submitted:
        st.info("Stellenanzeige ausfüllen und Qualität prüfen.")
        return
    job = Job(
        title=title or None,
        role_needed=role or None,
        seniority=seniority or None,
        industries=tuple(industries),
        leads_type=leads_type or None,
        sales_cycle_band=cycle or None,
        avg_commission_percent=commission or None,
        weekly_hours_needed=int(hours) or None,
        employment_type=employment or None,
        location_mode=mode or None,
        description_md=description or None,
    )
    quality = calculate_quality_score(job)
    c1, c2 = st.columns(2)
    c1.metric("Qualitäts-Score", f"{quality.score}/100", quality.publish_status)
    c1.progress(quality.score / 100.0)
    if can_publish(quality.score):
        c1.success("Anzeige kann veröffentlicht werden.")
    c2.dataframe(
        pd.DataFrame([{"Komponente": k, "Punkte": v} for k, v in quality.breakdown.as_dict().items()]),
        hide_index=True,
        use_container_width=True,
    )
    for item in quality.feedback:
        st.write(f"- {item}")


def _apply(event, timing: AttemptTiming):
    try:
        st.session_state["attempt"] = transition(st.session_state["attempt"], event, timing)
    except AttemptTransitionError as exc:
        st.warning(str(exc))


def _feed_clock(timing: AttemptTiming):
    now = time.monotonic()
    last = st.session_state["last_tick"]
    if last is None:
        st.session_state["last_tick"] = now
        return
    elapsed = int(now - last)
    if elapsed >= 1:
        # Carry the sub-second remainder into the next rerun.
        st.session_state["last_tick"] = last + elapsed
        _apply(Tick(seconds=elapsed), timing)


def render_assessment(settings, bank):
    timing = AttemptTiming(
        question_seconds=settings.question_seconds,
        part1_seconds=settings.part1_seconds,
        part2_seconds=settings.part2_seconds,
    )
    attempt = st.session_state["attempt"]
    if attempt is None:
        st.markdown("20 Multiple-Choice-Fragen + 1 Szenario-Aufgabe, ca. 10 Minuten.")
        if st.button("Assessment starten"):
            attempt = create_attempt(str(uuid.uuid4()), DEMO_USERNAME, bank.questions, bank.scenarios, settings.question_count)
            st.session_state["attempt"] = transition(attempt, StartAttempt(), timing)
            st.session_state["last_tick"] = time.monotonic()
            st.rerun()
        return

    if attempt.status == "in_progress":
        _feed_clock(timing)
        attempt = st.session_state["attempt"]
        st.button("Timer aktualisieren")

    if attempt.status == "in_progress" and attempt.current_part == 1:
        question = attempt.current_question
        st.caption(
            f"Teil 1 von 2 · Frage {attempt.current_question_index + 1}/{len(attempt.mc_questions)} · "
            f"{attempt.question_time_left}s"
        )
        st.markdown(f"### {question.question}")
        labels = {opt.id: opt.text for opt in question.options}
        selected = attempt.mc_answers.get(question.id)
        ids = list(labels)
        choice = st.radio(
            "Antwort",
            ids,
            index=ids.index(selected) if selected in ids else None,
            format_func=labels.get,
            key=f"answer_{question.id}",
        )
        if choice and choice != selected:
            _apply(SelectAnswer(question.id, choice), timing)
        if st.button("Weiter"):
            _apply(NextQuestion(), timing)
            st.rerun()
    elif attempt.status == "in_progress":
        scenario = attempt.scenario
        st.caption(f"Teil 2 von 2 · {attempt.part_time_left // 60}:{attempt.part_time_left % 60:02d}")
        st.markdown(f"### {scenario.title}")
        st.write(scenario.prompt)
        text = st.text_area("Ihre Antwort", value=attempt.scenario_response, height=220)
        if len(text) - len(attempt.scenario_response) > 40:
            _apply(PasteDetected(), timing)
        if text != attempt.scenario_response:
            _apply(UpdateScenarioResponse(text), timing)
        words = count_words(text)
        st.caption(f"Wörter {words}/{scenario.max_words} · {word_count_status(words, scenario)}")
        if st.button("Absenden", disabled=words < MIN_SUBMIT_WORDS):
            _apply(SubmitAssessment(), timing)
            st.rerun()

    attempt = st.session_state["attempt"]
    if attempt.status == "submitted":
        _apply(ScoreAttempt(), timing)
        attempt = st.session_state["attempt"]
    if attempt.status == "scored":
        render_result(attempt)


def render_result(attempt):
    result = attempt.result
    c1, c2, c3 = st.columns(3)
    c1.metric("Gesamt", f"{result.total_score}/27", result_grade(result))
    c2.metric("Teil 1", f"{result.part1_score}/20", f"{result.mc_raw_score}% roh")
    c3.metric("Teil 2", f"{result.part2_score}/7")
    categories = pd.DataFrame(
        [{"Kategorie": CATEGORY_LABELS[key], "Score": value} for key, value in result.as_dict()["categories"].items()]
    )
    st.bar_chart(categories.set_index("Kategorie"))
    st.caption(f"Einfügen erkannt: {attempt.proctor_flags.paste_count}")
    report = {"attempt_id": attempt.id, "user_id": attempt.user_id, "result": result.as_dict()}
    st.download_button("Ergebnis als JSON", data=json.dumps(report, indent=2), file_name=f"assessment_{attempt.id}.json", mime="application/json")
    if st.button("Neues Assessment"):
        st.session_state["attempt"] = None
        st.rerun()


settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title=APP_TITLE, layout="wide")
inject_styles()
st.title(APP_TITLE)
st.caption(APP_SUBTITLE)

jobs = load_jobs(settings.data_dir)
bank = load_question_bank(settings.data_dir)
ensure_state()

if st.session_state["authenticated"]:
    with st.sidebar:
        st.markdown("### Sitzung")
        st.success("Angemeldet als demo")
        if st.button("Abmelden"):
            st.session_state["authenticated"] = False
            st.session_state["attempt"] = None
            st.rerun()
        page = st.radio("Gehe zu", ["Start", "Job-Matching", "Qualitätscheck", "Assessment"])
        preset = st.selectbox("Profil-Vorlage", list(PROFILE_PRESETS.keys()))
        if st.button("Vorlage laden"):
            st.session_state["profile"] = UserProfile.from_dict(PROFILE_PRESETS[preset])
            st.success(f"Vorlage geladen: {preset}")
else:
    with st.sidebar:
        st.markdown("### Sitzung")
        st.info("Bitte auf der Startseite anmelden.")
    page = "Start"

if page == "Start":
    render_landing_page()
elif page == "Job-Matching":
    render_job_matching(jobs)
elif page == "Qualitätscheck":
    render_job_quality()
else:
    render_assessment(settings, bank)
