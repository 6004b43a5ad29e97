import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..ingest.gateway import IngestionGateway
from ..views.graph_view import GraphView
from ..views.live_view import LiveView
from ..views.readings_view import ReadingsView
from .config import AppConfig, load_config
from .schemas import ViewInfo
from .utils import get_zone

logger = logging.getLogger(__name__)

View = Union[LiveView, GraphView, ReadingsView]


class ViewManager:
    def __init__(self):
        self.views: Dict[str, View] = {}
        self.config: Optional[AppConfig] = None
        self.gateway: Optional[IngestionGateway] = None

    def load_from_config(self, cfg_path: Optional[Path] = None, gateway: Optional[IngestionGateway] = None):
        self.configure(load_config(cfg_path), gateway=gateway)

    def configure(self, cfg: AppConfig, gateway: Optional[IngestionGateway] = None):
        self.config = cfg
        self.gateway = gateway or IngestionGateway(cfg.backend.base_url, timeout=cfg.backend.timeout_seconds)
        display_tz = get_zone(cfg.display.timezone)
        source_tz = get_zone(cfg.display.source_timezone)
        self.register(LiveView(
            "live", self.gateway,
            poll_seconds=cfg.views.live.poll_seconds,
            display_tz=display_tz, source_tz=source_tz,
        ))
        self.register(GraphView(
            "graph", self.gateway,
            interval=cfg.views.graph.interval,
            bootstrap_limit=cfg.views.graph.bootstrap_limit,
            palette=cfg.display.palette,
            tz=source_tz,
        ))
        self.register(ReadingsView(
            "readings", self.gateway,
            limit=cfg.views.readings.limit,
            limit_options=cfg.views.readings.limit_options,
            display_tz=display_tz, source_tz=source_tz,
        ))

    def register(self, view: View):
        old = self.views.get(view.name)
        if old is not None:
            old.close()
        self.views[view.name] = view

    def get(self, name: str) -> Optional[View]:
        return self.views.get(name)

    def start_all(self):
        for view in self.views.values():
            logger.info("Starting %s view '%s'", view.kind, view.name)
            view.start()

    def close_all(self):
        for view in self.views.values():
            view.close()
        self.views.clear()

    def list(self) -> List[ViewInfo]:
        return [
            ViewInfo(name=v.name, kind=v.kind, status=v.status, error=v.controller.error)
            for v in self.views.values()
        ]


manager = ViewManager()
