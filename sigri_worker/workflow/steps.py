"""Step actions of the ONR/SIG-RI extraction.

Each action receives the run's ``StepContext``, drives the browser session and
records what it produced in ``ctx.state``. Actions raise ``StepFailure`` when
the portal did not reach the state they need; whether that aborts the run is
decided by the pipeline, not here.
"""
import logging

from sigri_worker.browser.locators import by_css, by_role, by_text, first_match, iter_matches
from sigri_worker.core import config as c
from sigri_worker.core.errors import StepFailure
from sigri_worker.models.job import SearchType
from sigri_worker.workflow.utils import artifact_dir, artifact_filename, as_backend_path

logger = logging.getLogger(__name__)

CERTIFICATE_LOGIN = by_text("Entrar com Certificado Digital")

SEARCH_SCOPE_LOCATORS = (
    by_text("Camada de Busca", exact=True),
    by_text("Camada"),
)

SEARCH_TYPE_LOCATORS = {
    SearchType.CAR: (by_text("Cadastro Ambiental Rural"),),
    SearchType.ADDRESS: (by_text("Endereço", exact=True), by_text("Endereço")),
}

SEARCH_INPUT = by_css("input:visible")
SUGGESTION_OPTION = by_css("[role='listbox'] [role='option']")

LAYER_CONTROL_LOCATORS = (
    by_text("Camadas", exact=True),
    by_role("button", name="Camadas"),
    by_css("[title*='Camadas'], [aria-label*='Camadas']"),
)

ENABLE_ALL_LAYERS_LOCATORS = (
    by_text("Ativar todas"),
    by_text("Selecionar todas"),
    by_css("[title*='Ativar todas'], [aria-label*='Ativar todas']"),
)

DOWNLOAD_LOCATORS = (
    by_text("Baixar polígono"),
    by_css("[title*='Baixar'][title*='polígono'], [aria-label*='Baixar'][aria-label*='polígono']"),
)


def _click_first(ctx, locators, what: str, timeout_ms: int = c.ACTION_TIMEOUT_MS):
    match = first_match(ctx.session, locators, timeout_ms)
    if match is None:
        tried = ", ".join(loc.describe() for loc in locators)
        raise StepFailure(f"{what} not found (tried {tried})")
    locator, element = match
    element.click(timeout_ms)
    logger.info("Clicked %s via %s", what, locator.describe(), extra=ctx.log_extra)
    return locator


def authenticate(ctx) -> None:
    ctx.session.goto(c.LOGIN_URL)
    button = ctx.session.find(CERTIFICATE_LOGIN, c.LOGIN_ACTION_TIMEOUT_MS)
    if button is not None:
        button.click(c.LOGIN_ACTION_TIMEOUT_MS)
        logger.info("Certificate login clicked", extra=ctx.log_extra)
    else:
        logger.info("Certificate login not offered, assuming an authenticated session", extra=ctx.log_extra)
    ctx.session.pause(c.LOGIN_SETTLE_MS)


def open_working_surface(ctx) -> None:
    ctx.session.goto(c.MAP_URL)
    ctx.session.pause(c.MAP_SETTLE_MS)


def select_search_scope(ctx) -> None:
    _click_first(ctx, SEARCH_SCOPE_LOCATORS, "search scope control")
    ctx.session.pause(c.SCOPE_SETTLE_MS)


def select_search_type(ctx) -> None:
    search_type = ctx.state["search_type"]
    _click_first(ctx, SEARCH_TYPE_LOCATORS[search_type], f"{search_type} scope option")


def submit_query(ctx) -> None:
    session = ctx.session
    field = session.find(SEARCH_INPUT, c.ACTION_TIMEOUT_MS)
    if field is None:
        raise StepFailure("search input not found on the map page")

    field.fill(ctx.state["search_value"])
    session.pause(c.INPUT_SETTLE_MS)

    option = session.find(SUGGESTION_OPTION, c.SUGGESTION_TIMEOUT_MS)
    if option is not None:
        option.click(c.OPTION_CLICK_TIMEOUT_MS)
        logger.info("Autocomplete suggestion selected", extra=ctx.log_extra)
    else:
        field.press("Enter")
        logger.info("No suggestion offered, submitted raw value", extra=ctx.log_extra)
    session.pause(c.SEARCH_SETTLE_MS)


def activate_all_layers(ctx) -> None:
    _click_first(ctx, LAYER_CONTROL_LOCATORS, "layer control")
    ctx.session.pause(c.LAYERS_SETTLE_MS)
    _click_first(ctx, ENABLE_ALL_LAYERS_LOCATORS, "enable-all-layers action")
    ctx.session.pause(c.LAYERS_SETTLE_MS)


def select_result_feature(ctx) -> None:
    # The download control only appears once a polygon is selected on the map
    ctx.session.click_at(c.FEATURE_CLICK_X, c.FEATURE_CLICK_Y)
    ctx.session.pause(c.FEATURE_SETTLE_MS)


def resolve_artifact(ctx) -> None:
    ctx.state["download"] = None
    for locator, trigger in iter_matches(ctx.session, DOWNLOAD_LOCATORS, c.ACTION_TIMEOUT_MS):
        download = ctx.session.download(trigger, ctx.settings.DOWNLOAD_TIMEOUT_MS)
        if download is not None:
            ctx.state["download"] = download
            logger.info("Polygon download started via %s", locator.describe(), extra=ctx.log_extra)
            return
        logger.warning("Download trigger %s produced no file", locator.describe(), extra=ctx.log_extra)
    logger.info("No polygon available for this search", extra=ctx.log_extra)


def has_download(state) -> bool:
    return state.get("download") is not None


def persist_artifact(ctx) -> None:
    state = ctx.state
    saved_at = ctx.clock()
    file_name = artifact_filename(state["project_id"], saved_at)
    worker_path = str(artifact_dir(ctx.settings.DATA_DIR) / file_name)

    state["download"].save_as(worker_path)
    backend_path = as_backend_path(worker_path, ctx.settings.DATA_DIR, ctx.settings.BACKEND_UPLOADS_BASE)

    document_id = ctx.job_store.insert_document({
        "project_id": state["project_id"],
        "doc_type": c.DOCUMENT_TYPE,
        "stored_filename": file_name,
        "original_filename": file_name,
        "content_type": c.ARTIFACT_CONTENT_TYPE,
        "description": f"Polígono ONR/SIG-RI ({state['search_type']}: {state['search_value']})",
        "file_path": backend_path,
    })

    state.update(
        artifact_path=worker_path,
        backend_path=backend_path,
        saved_at=saved_at,
        document_id=document_id,
    )
    logger.info("Polygon saved", extra={**ctx.log_extra, "document_id": document_id, "path": worker_path})


def persist_outcome(ctx) -> None:
    state = ctx.state
    saved_at = state.get("saved_at")
    metadata = {
        "fonte": c.RESULT_SOURCE,
        "document_id": state.get("document_id"),
        "downloaded": state.get("artifact_path") is not None,
        "search": {"type": str(state["search_type"]), "value": state["search_value"]},
        "saved_worker_path": state.get("artifact_path"),
        "saved_backend_path": state.get("backend_path"),
        "saved_at_utc": saved_at.isoformat() if saved_at else None,
        "skipped_steps": list(state.get("skipped_steps", [])),
    }
    state["result_id"] = ctx.job_store.insert_result(state["job_id"], {
        "protocolo": None,
        "matricula": None,
        "cnm": None,
        "cartorio": None,
        "data_pedido": None,
        "file_path": state.get("backend_path"),
        "metadata": metadata,
    })
    state["result_metadata"] = metadata
