from __future__ import annotations

from typing import Any, Iterator, Optional

from pydantic import ValidationError

from app_logging.activity_logger import ActivityLogger
from config.settings import settings
from engine.errors import TemplateNotFoundError, TemplateValidationError
from persistence.kv_store import KeyValueStore
from schemas.admin_config import GlobalConfig, ProjectSetting
from schemas.template import Template

logger = ActivityLogger("repository")


class _NamespacedRepository:
    """Owns key construction so no caller concatenates store keys by hand."""

    def __init__(self, store: KeyValueStore, namespace: Optional[str] = None) -> None:
        self.store = store
        self.namespace = namespace or settings.storage_namespace

    def _key(self, *parts: str) -> str:
        return ":".join((self.namespace, *parts))


class TemplateRepository(_NamespacedRepository):
    """
    Template records plus the ordered id index (newest first).

    Keys:
        <ns>:index             -> ["tmpl_b", "tmpl_a", ...]
        <ns>:template:<id>     -> Template record (camelCase JSON)

    The index read-modify-write in add()/remove() is not atomic under
    concurrent writers.
    """

    @property
    def index_key(self) -> str:
        return self._key("index")

    def template_key(self, template_id: str) -> str:
        return self._key("template", template_id)

    # ── Index ─────────────────────────────────────────────────────────────────

    def read_index(self) -> list[str]:
        raw = self.store.get(self.index_key)
        if not isinstance(raw, list):
            return []
        return [tid for tid in raw if isinstance(tid, str)]

    def write_index(self, ids: list[str]) -> None:
        self.store.set(self.index_key, list(ids))

    # ── Records ───────────────────────────────────────────────────────────────

    def get(self, template_id: str) -> Optional[Template]:
        """Return the stored record, soft-deleted ones included, or None."""
        raw = self.store.get(self.template_key(template_id))
        if raw is None:
            return None
        try:
            return Template.model_validate(raw)
        except ValidationError as exc:
            logger.warning(
                "template_record_unreadable",
                template_id=template_id,
                error_message=str(exc),
            )
            return None

    def get_live(self, template_id: Optional[str]) -> Template:
        """Return a non-deleted template or raise."""
        if not template_id:
            raise TemplateValidationError("Template id is required")
        tpl = self.get(template_id)
        if tpl is None or tpl.deleted:
            raise TemplateNotFoundError("Template not found", template_id=template_id)
        return tpl

    def save(self, template: Template) -> None:
        self.store.set(self.template_key(template.id), template.to_json_dict())

    def add(self, template: Template) -> None:
        """Persist a new template and put its id at the head of the index."""
        self.save(template)
        ids = self.read_index()
        ids.insert(0, template.id)
        self.write_index(ids)

    def remove(self, template_id: str) -> None:
        """Hard delete: drop the record and its index entry."""
        self.store.delete(self.template_key(template_id))
        self.write_index([tid for tid in self.read_index() if tid != template_id])

    def iter_templates(self, include_deleted: bool = False) -> Iterator[Template]:
        """Yield templates in index order, skipping ids with no readable record."""
        for template_id in self.read_index():
            tpl = self.get(template_id)
            if tpl is None:
                continue
            if tpl.deleted and not include_deleted:
                continue
            yield tpl


class ConfigRepository(_NamespacedRepository):
    """Global config (`<ns>:config`) and the project settings map (`<ns>:projects`)."""

    @property
    def config_key(self) -> str:
        return self._key("config")

    @property
    def project_settings_key(self) -> str:
        return self._key("projects")

    def read_global_config(self) -> GlobalConfig:
        raw = self.store.get(self.config_key)
        if not isinstance(raw, dict):
            return GlobalConfig()
        merged: dict[str, Any] = GlobalConfig().to_json_dict()
        merged.update(raw)
        try:
            return GlobalConfig.model_validate(merged)
        except ValidationError as exc:
            logger.warning("global_config_unreadable", error_message=str(exc))
            return GlobalConfig()

    def write_global_config(self, config: GlobalConfig) -> None:
        self.store.set(self.config_key, config.to_json_dict())

    def read_project_settings(self) -> dict[str, ProjectSetting]:
        raw = self.store.get(self.project_settings_key)
        if not isinstance(raw, dict):
            return {}
        result: dict[str, ProjectSetting] = {}
        for project_key, entry in raw.items():
            if isinstance(entry, dict):
                result[project_key] = ProjectSetting(enabled=bool(entry.get("enabled")))
        return result

    def write_project_settings(self, project_settings: dict[str, ProjectSetting]) -> None:
        self.store.set(
            self.project_settings_key,
            {key: entry.to_json_dict() for key, entry in project_settings.items()},
        )
