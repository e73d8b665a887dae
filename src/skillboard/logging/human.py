"""
Human Log -- formatter and helper for board traceability logs.

Produces short readable lines for what changed, for example:

    ✓ enabled skill pdf-tools
    → moved skill pdf-tools to Documents
    + category Documents
    ⚠ enable-all in Documents: 1 of 3 moves failed
"""

import logging
import sys

from .levels import HUMAN


class HumanFormatter:
    """Turns structured HUMAN events into readable lines.

    Every event has its own format. Unknown events return None.
    """

    def format_event(self, event: str, **kw) -> str | None:
        match event:

            # ── Units ───────────────────────────────────────────────────
            case "engine.unit.toggled":
                mark = "✓ enabled" if kw.get("enabled") else "○ disabled"
                return f"{mark} {kw.get('kind', 'unit')} {kw.get('unit', '?')}"

            case "engine.unit.moved":
                return f"→ moved {kw.get('kind', 'unit')} {kw.get('unit', '?')} to {kw.get('category', '?')}"

            case "engine.unit.deleted":
                return f"✗ deleted {kw.get('kind', 'unit')} {kw.get('unit', '?')}"

            case "engine.batch.complete":
                action = "enable-all" if kw.get("enabled") else "disable-all"
                category = kw.get("category", "?")
                total = kw.get("total", 0)
                failed = kw.get("failed", 0)
                if failed:
                    return f"⚠  {action} in {category}: {failed} of {total} moves failed"
                return f"✓ {action} in {category} ({total} units)"

            # ── Categories ──────────────────────────────────────────────
            case "engine.category.added":
                return f"+ category {kw.get('category', '?')}"

            case "engine.category.renamed":
                return f"~ category {kw.get('old', '?')} → {kw.get('new', '?')}"

            case "engine.category.removed":
                moved = kw.get("moved", 0)
                target = kw.get("target") or "-"
                return f"- category {kw.get('category', '?')} ({moved} units → {target})"

            case "engine.category.reordered":
                return "↕ categories: " + ", ".join(kw.get("order", []))

            # ── Lifecycle ───────────────────────────────────────────────
            case "engine.reload.complete":
                return f"↻ loaded {kw.get('skills', 0)} skills, {kw.get('commands', 0)} commands"

            case _:
                return None


class HumanLogHandler(logging.Handler):
    """Logging handler that formats HUMAN events.

    Only handles records at exactly HUMAN (25). Writes to stderr so stdout
    stays clean for command output.
    """

    _RECORD_ATTRS = (
        "msg", "args", "levelname", "levelno", "pathname",
        "filename", "module", "exc_info", "exc_text", "stack_info",
        "lineno", "funcName", "created", "msecs", "relativeCreated",
        "thread", "threadName", "processName", "process", "message",
        "taskName", "name", "event",
    )

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            # structlog hands over the event dict unrendered (wrap_for_formatter)
            if isinstance(record.msg, dict):
                kw = dict(record.msg)
                event = str(kw.pop("event", ""))
            else:
                event = getattr(record, "event", None) or record.getMessage()
                kw = {
                    k: v for k, v in record.__dict__.items()
                    if not k.startswith("_") and k not in self._RECORD_ATTRS
                }

            formatted = self.formatter_inst.format_event(event, **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


class HumanLog:
    """Typed helper to emit HUMAN-level events.

    Usage:
        hlog = HumanLog(structlog.get_logger())
        hlog.unit_toggled("pdf-tools", "skill", enabled=True)
    """

    def __init__(self, logger) -> None:
        self._log = logger

    def unit_toggled(self, unit: str, kind: str, enabled: bool) -> None:
        self._log.log(HUMAN, "engine.unit.toggled", unit=unit, kind=kind, enabled=enabled)

    def unit_moved(self, unit: str, kind: str, category: str) -> None:
        self._log.log(HUMAN, "engine.unit.moved", unit=unit, kind=kind, category=category)

    def unit_deleted(self, unit: str, kind: str) -> None:
        self._log.log(HUMAN, "engine.unit.deleted", unit=unit, kind=kind)

    def batch_complete(self, category: str, enabled: bool, total: int, failed: int) -> None:
        self._log.log(
            HUMAN, "engine.batch.complete",
            category=category,
            enabled=enabled,
            total=total,
            failed=failed,
        )

    def category_added(self, category: str) -> None:
        self._log.log(HUMAN, "engine.category.added", category=category)

    def category_renamed(self, old: str, new: str) -> None:
        self._log.log(HUMAN, "engine.category.renamed", old=old, new=new)

    def category_removed(self, category: str, moved: int, target: str | None) -> None:
        self._log.log(HUMAN, "engine.category.removed", category=category, moved=moved, target=target)

    def categories_reordered(self, order: list[str]) -> None:
        self._log.log(HUMAN, "engine.category.reordered", order=order)

    def reload_complete(self, skills: int, commands: int) -> None:
        self._log.log(HUMAN, "engine.reload.complete", skills=skills, commands=commands)
