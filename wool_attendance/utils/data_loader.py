"""Startup and reload policy for the shared application state.

No endpoint configured: load the demo dataset.  Endpoint configured: try
the remote workbook and fall back to the demo dataset on any failure,
keeping the error message so the UI can show why it is in demo mode.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, Optional

from ..errors import EndpointNotConfigured, SyncError
from ..integrations.script_gateway import ScriptGateway, empty_result_warning
from ..state import SOURCE_DEMO, SOURCE_REMOTE, AppState
from .meeting_dates import sundays
from .seed_data import build_seed_dataset
from .settings_store import SettingsStore

log = logging.getLogger(__name__)

EXTENSION_KEY = "wool_attendance"


def init_state(app) -> AppState:
    """Build settings, gateway and state once and attach them to ``app``."""
    settings = SettingsStore(app.config["SETTINGS_FILE"])
    env_url = app.config.get("SCRIPT_URL", "")
    if env_url and not settings.get_script_url():
        settings.set_script_url(env_url)

    gateway = ScriptGateway(
        settings,
        timeout=app.config.get("REQUEST_TIMEOUT"),
        tz_name=app.config.get("TZ", "Asia/Seoul"),
    )
    state = AppState(meeting_dates=sundays(app.config.get("TARGET_YEAR", 2026)))
    app.extensions[EXTENSION_KEY] = {"settings": settings, "gateway": gateway, "state": state}

    load_state(app)
    return state


def _components(app) -> Dict[str, Any]:
    try:
        return app.extensions[EXTENSION_KEY]
    except KeyError:
        raise RuntimeError("Application state is not initialised; call init_state(app).") from None


def get_state(app) -> AppState:
    return _components(app)["state"]


def get_gateway(app) -> ScriptGateway:
    return _components(app)["gateway"]


def get_settings(app) -> SettingsStore:
    return _components(app)["settings"]


def _load_demo(app, state: AppState, error: Optional[str] = None) -> None:
    seed = app.config.get("SEED_RANDOM")
    rng = random.Random(seed) if seed is not None else None
    dataset = build_seed_dataset(app.config.get("TARGET_YEAR", 2026), rng)
    state.replace(data_source=SOURCE_DEMO, last_error=error, **dataset)
    app.logger.info(
        "Demo dataset loaded: %d members, %d attendance records",
        len(state.members),
        len(state.attendance),
    )


def load_state(app) -> AppState:
    """(Re)load every collection following the startup policy."""
    components = _components(app)
    state: AppState = components["state"]
    gateway: ScriptGateway = components["gateway"]

    try:
        snapshot = gateway.fetch_all()
    except EndpointNotConfigured:
        app.logger.info("No spreadsheet endpoint configured; running in demo mode.")
        _load_demo(app, state)
        return state
    except SyncError as exc:
        app.logger.warning("Remote load failed (%s); falling back to demo data.", exc)
        _load_demo(app, state, error=str(exc))
        return state
    except Exception as exc:
        app.logger.exception("Unexpected error loading remote data; falling back to demo data.")
        _load_demo(app, state, error=f"Unexpected error: {exc}")
        return state

    diagnostics = {"debugSheets": snapshot.debug_sheets, "connectedId": snapshot.connected_id}
    if not snapshot.members:
        diagnostics["warning"] = empty_result_warning(snapshot)
        app.logger.warning(diagnostics["warning"])

    state.replace(
        members=snapshot.members,
        attendance=snapshot.attendance,
        prayers=snapshot.prayers,
        meeting_status=snapshot.meeting_status,
        data_source=SOURCE_REMOTE,
        diagnostics=diagnostics,
    )
    return state
