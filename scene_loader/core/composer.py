"""
Scene composer. Orchestrates one load session end to end:

  1. Resolve the address (empty → default sample asset)
  2. Fetch (async; completion is marshaled back onto the tick loop)
  3. Decode the payload into a node subtree
  4. Normalize orientation / scale
  5. Snapshot the environment mode once
  6. Attach under the immersive rig, or under a new desktop controller

Any stage failure is logged and ends the session with nothing attached.
Sessions are serialized: a start request while a fetch is outstanding is
rejected with ``SessionBusyError``.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import PurePosixPath
from urllib.parse import urlparse

from engine.scene import Node3D
from engine.tree import SceneTree

from ..config import LoaderSettings
from ..errors import (
    DecodeError,
    EmptySceneError,
    HttpError,
    LoaderError,
    RigNotFoundError,
    SessionBusyError,
    TransportError,
)
from ..schemas import EnvironmentMode, SessionOutcome, SessionState, SessionView
from .attachments import AssetAttachment, DesktopAttachment, ImmersiveAttachment
from .decoder import decode_asset
from .environment import detect_environment
from .fetcher import AssetFetcher, FetchResult
from .orientation import normalize_orientation

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _asset_name(address: str) -> str:
    stem = PurePosixPath(urlparse(address).path).stem
    return stem or "AssetRoot"


@dataclass(frozen=True)
class AssetRequest:
    address: str


@dataclass
class SessionRecord:
    id: str
    request: AssetRequest
    state: SessionState
    started_at: datetime
    finished_at: datetime | None = None
    outcome: SessionOutcome | None = None
    mode: EnvironmentMode | None = None
    detail: str = ""
    attached_under: str | None = None
    done_event: asyncio.Event = field(default_factory=asyncio.Event)

    @property
    def attached(self) -> bool:
        return self.attached_under is not None

    def as_view(self) -> SessionView:
        return SessionView(
            id=self.id,
            address=self.request.address,
            state=self.state,
            outcome=self.outcome,
            mode=self.mode,
            detail=self.detail,
            attached_under=self.attached_under,
            started_at=self.started_at,
            finished_at=self.finished_at,
        )


class SceneComposer(Node3D):
    def __init__(
        self,
        settings: LoaderSettings,
        fetcher: AssetFetcher | None = None,
        name: str = "SceneComposer",
        url: str = "",
        autostart: bool = False,
    ):
        super().__init__(name)
        self.settings = settings
        self.fetcher = fetcher or AssetFetcher()
        self.url = url
        self.autostart = autostart
        self._state = SessionState.idle
        self._session: SessionRecord | None = None
        self._fetch_task: asyncio.Task | None = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> SessionRecord | None:
        return self._session

    @property
    def fetch_task(self) -> asyncio.Task | None:
        return self._fetch_task

    def set_url(self, url: str) -> None:
        self.url = url

    def _ready(self) -> None:
        if self.autostart:
            self.on_session_start(self.url)

    # ------------------------------------------------------------------
    # Session start
    # ------------------------------------------------------------------

    def on_session_start(self, address: str = "") -> SessionRecord:
        if self._state == SessionState.fetching:
            active = self._session.id if self._session else "?"
            logger.warning("session_rejected reason=busy active=%s", active)
            raise SessionBusyError(f"Session '{active}' is still fetching")

        tree = self.tree
        if tree is None:
            raise LoaderError(f"Composer '{self.name}' is not inside a scene tree")

        resolved = (address or "").strip() or self.settings.default_asset_url
        record = SessionRecord(
            id=f"load_{uuid.uuid4().hex[:10]}",
            request=AssetRequest(resolved),
            state=SessionState.fetching,
            started_at=_utc_now(),
        )

        def _deliver(result: FetchResult) -> None:
            # completion may land outside the frame; scene work waits for the tick loop
            tree.call_deferred(self._on_fetch_completed, record, result, tree)

        self._fetch_task = tree.track(self.fetcher.fetch(resolved, _deliver))
        self._session = record
        self._state = SessionState.fetching
        logger.info("session_started id=%s url=%s", record.id, resolved[:160])
        return record

    async def wait_for_completion(self, timeout_seconds: float) -> SessionRecord:
        record = self._session
        if record is None:
            raise RuntimeError("No load session has been started")
        try:
            await asyncio.wait_for(record.done_event.wait(), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            raise RuntimeError(f"Session '{record.id}' did not finish within {timeout_seconds}s")
        return record

    # ------------------------------------------------------------------
    # Pipeline (runs on the tick loop)
    # ------------------------------------------------------------------

    def _on_fetch_completed(self, record: SessionRecord, result: FetchResult, tree: SceneTree) -> None:
        try:
            self._run_pipeline(record, result, tree)
        except Exception as exc:
            logger.exception("session_failed id=%s stage=pipeline", record.id)
            if record.state != SessionState.done:
                self._finish(record, SessionOutcome.pipeline_error, f"Error: {str(exc)[:200]}")

    def _run_pipeline(self, record: SessionRecord, result: FetchResult, tree: SceneTree) -> None:
        try:
            payload = result.raise_for_status()
        except HttpError as exc:
            logger.error("session_failed id=%s stage=fetch code=%s", record.id, exc.code)
            self._finish(record, SessionOutcome.http_error, str(exc))
            return
        except TransportError as exc:
            logger.error("session_failed id=%s stage=fetch reason=%s", record.id, exc)
            self._finish(record, SessionOutcome.transport_error, str(exc))
            return

        try:
            asset = decode_asset(
                payload,
                self.settings.base_resolution_path,
                file_type=self.settings.asset_file_type,
                root_name=_asset_name(record.request.address),
            )
        except EmptySceneError as exc:
            logger.info("session_noop id=%s stage=decode reason=%s", record.id, exc)
            self._finish(record, SessionOutcome.empty_scene, str(exc))
            return
        except DecodeError as exc:
            logger.error("session_failed id=%s stage=decode reason=%s", record.id, exc)
            self._finish(record, SessionOutcome.decode_error, str(exc))
            return

        normalize_orientation(asset.root)

        mode = detect_environment(tree.xr_server)
        record.mode = mode
        attachment = self._select_attachment(mode, tree)

        try:
            frame = attachment.attach(asset.root)
        except RigNotFoundError as exc:
            logger.error("session_failed id=%s stage=attach reason=%s", record.id, exc)
            self._finish(record, SessionOutcome.rig_missing, str(exc))
            return

        outcome = (
            SessionOutcome.attached_immersive
            if mode == EnvironmentMode.immersive
            else SessionOutcome.attached_desktop
        )
        self._finish(
            record,
            outcome,
            f"{asset.mesh_count} meshes under '{frame.name}'",
            attached_under=frame.name,
        )

    def _select_attachment(self, mode: EnvironmentMode, tree: SceneTree) -> AssetAttachment:
        if mode == EnvironmentMode.immersive:
            return ImmersiveAttachment(
                scene_root=tree.current_scene or tree.root,
                rig_name=self.settings.xr_rig_name,
                forward_offset=self.settings.immersive_asset_offset,
            )
        return DesktopAttachment(
            parent=self,
            forward_speed=self.settings.desktop_forward_speed,
            turn_speed=self.settings.desktop_turn_speed,
        )

    def _finish(
        self,
        record: SessionRecord,
        outcome: SessionOutcome,
        detail: str,
        attached_under: str | None = None,
    ) -> None:
        record.outcome = outcome
        record.detail = detail
        record.attached_under = attached_under
        record.state = SessionState.done
        record.finished_at = _utc_now()
        if record is self._session:
            self._state = SessionState.done
        record.done_event.set()
        logger.info("session_finished id=%s outcome=%s", record.id, outcome.value)
