from datetime import datetime
from html import escape

from ._config import LaunchConfig
from ._orchestrator import LaunchOutcome, LaunchState
from .models.fhir import ObservationSummary, PatientSummary

PAGE_TITLE = "SMART on FHIR (R4)"


def _text(value: object) -> str:
    return "" if value is None else escape(str(value))


def render_patient(patient: PatientSummary) -> str:
    return (
        '<div class="patient-info">'
        f"<h2>{_text(patient.name)}</h2>"
        f"<p><strong>Gender:</strong> {_text(patient.gender)}</p>"
        f"<p><strong>DOB:</strong> {_text(patient.birth_date)}</p>"
        f"<p><strong>Status:</strong> {'Active' if patient.active else 'Inactive'}</p>"
        f"<p><strong>Address:</strong> {_text(patient.address)}</p>"
        "</div>"
    )


def format_effective(value: str | None) -> str | None:
    """Format a FHIR dateTime for display, partial dates are shown as received."""
    if not value:
        return value

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value

    if "T" not in value:
        return f"{parsed:%d %b %Y}"

    formatted = f"{parsed:%d %b %Y %H:%M}"

    if parsed.tzinfo is not None:
        formatted = f"{formatted} {parsed.tzname()}"

    return formatted


def render_observations(observations: list[ObservationSummary]) -> str:
    if not observations:
        return ""

    items = "".join(
        "<li>"
        f"<strong>{_text(observation.code)}</strong>: "
        f"{_text(observation.value)} {_text(observation.unit)}"
        f"<br /><small>{_text(format_effective(observation.effective))}</small>"
        "</li>"
        for observation in observations
    )

    return (
        '<div class="observation-section">'
        f"<h3>Recent Observations</h3><ul>{items}</ul>"
        "</div>"
    )


def render_no_session(config: LaunchConfig) -> str:
    login = ""

    if config.default_launch_url:
        login = (
            f'<a class="login" href="{escape(config.default_launch_url, quote=True)}">'
            "Login with Cerner</a>"
        )

    return f'<div class="loading"><p>No active session</p>{login}</div>'


def render_page(outcome: LaunchOutcome, config: LaunchConfig) -> str:
    parts = [f"<h1>{PAGE_TITLE}</h1>"]

    if outcome.error:
        parts.append(f'<p class="error">{_text(outcome.error)}</p>')

    if outcome.patient:
        parts.append(render_patient(outcome.patient))
    elif outcome.state is LaunchState.NO_SESSION:
        parts.append(render_no_session(config))

    parts.append(render_observations(outcome.observations))
    parts.append(
        '<form method="post" action="logout">'
        '<button type="submit" class="logout">Logout</button>'
        "</form>"
    )

    script = ""

    if outcome.replace_url:
        # drop ?code=... from the address bar without reloading
        script = (
            "<script>window.history.replaceState({}, '', "
            f"{_js_string(outcome.replace_url)});</script>"
        )

    return (
        "<!DOCTYPE html><html><head>"
        f"<meta charset=\"utf-8\"><title>{PAGE_TITLE}</title>"
        "</head><body>"
        f'<div class="container"><div class="card">{"".join(parts)}</div></div>'
        f"{script}</body></html>"
    )


def _js_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace("'", "\\'")
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
    )

    return f"'{escaped}'"
