"""
DifferentialReconciler: применение плана изменений к DNS.

План строит ReconcileComparator (чистая функция), здесь он исполняется
через DirectoryService:
    1. reverse -> alias -> mapping, строго последовательно
    2. внутри шага: сначала удаления, затем вставки
    3. перед вставкой RRset на том же имени/типе удаляется

Первая ошибка прерывает работу и пробрасывается вызывающему.
Повторный вызов на уже сошедшемся состоянии ничего не меняет.

Пример использования:
    reconciler = DifferentialReconciler(directory, dry_run=True)
    stats = reconciler.reconcile("example.org.", 3600, current, desired)
    # {"created": 2, "deleted": 1, "skipped": 0, "details": {...}}
"""

from typing import TYPE_CHECKING, Any, Dict, List, Optional

from ..core.constants import DEFAULT_TTL
from ..core.context import RunContext, get_current_context
from ..core.domain.reconcile import ReconcileComparator, ReconcileDiff
from ..core.exceptions import ZoneInventoryError
from ..core.logging import LogContext, OperationLog, get_logger
from ..core.models import Device
from .directory import DirectoryService

if TYPE_CHECKING:
    from ..config import Config

logger = get_logger(__name__)


class ReconcileStats:
    """
    Счётчики и детали reconcile.

    Example:
        s = ReconcileStats()
        s.add("created", "reverse", "+ 192.168.1.10 [168.192.in-addr.arpa.]")
        s.result()  # {"created": 1, "deleted": 0, "skipped": 0, "details": {...}}
    """

    _DETAIL_KEY_MAP = {
        "created": "create",
        "deleted": "delete",
        "skipped": "skip",
    }

    def __init__(self):
        self.stats: Dict[str, int] = {op: 0 for op in self._DETAIL_KEY_MAP}
        self.details: Dict[str, List[Dict[str, str]]] = {
            key: [] for key in self._DETAIL_KEY_MAP.values()
        }

    def add(self, op: str, object_type: str, item: Any) -> None:
        self.stats[op] += 1
        self.details[self._DETAIL_KEY_MAP[op]].append({
            "type": object_type,
            "item": str(item),
        })

    def result(self) -> Dict[str, Any]:
        """Возвращает stats с вложенным details."""
        result: Dict[str, Any] = dict(self.stats)
        result["details"] = dict(self.details)
        return result


class DifferentialReconciler:
    """
    Приводит опубликованное состояние устройства к нужному.

    Attributes:
        directory: DirectoryService
        dry_run: Только логировать план
        ctx: Контекст выполнения
        ttl: TTL вставляемых записей, когда ttl не передан (None)
    """

    def __init__(
        self,
        directory: DirectoryService,
        dry_run: bool = False,
        context: Optional[RunContext] = None,
        ttl: int = DEFAULT_TTL,
    ):
        """
        Args:
            directory: Сервис для изменений
            dry_run: Режим симуляции (ничего не меняет)
            context: Контекст выполнения (None: глобальный)
            ttl: TTL по умолчанию
        """
        self.directory = directory
        self.ttl = ttl
        self.ctx = context or get_current_context()
        self.dry_run = dry_run or bool(self.ctx and self.ctx.dry_run)
        self._comparator = ReconcileComparator()

    @classmethod
    def from_config(
        cls,
        config: Optional["Config"] = None,
        dry_run: bool = False,
        context: Optional[RunContext] = None,
        **kwargs,
    ) -> "DifferentialReconciler":
        """Reconciler по секциям directory и zones (TTL из zones.ttl)."""
        if config is None:
            from ..config import load_config
            config = load_config()

        directory = kwargs.pop("directory", None) or DirectoryService.from_config(config, **kwargs)
        return cls(directory, dry_run=dry_run, context=context, ttl=config.validated.zones.ttl)

    def _ttl(self, ttl: Optional[int]) -> int:
        return self.ttl if ttl is None else ttl

    def plan(self, zone: str, ttl: Optional[int], current: Device, desired: Device) -> List[ReconcileDiff]:
        """План изменений без обращения к серверу."""
        return self._comparator.compare(zone, self._ttl(ttl), current, desired)

    def reconcile(self, zone: str, ttl: Optional[int], current: Device, desired: Device) -> Dict[str, Any]:
        """
        Полный reconcile: reverse, alias, mapping.

        Args:
            zone: Прямая зона
            ttl: TTL для вставляемых записей (None: self.ttl)
            current: Опубликованное состояние
            desired: Нужное состояние

        Returns:
            Dict: {"created": N, "deleted": N, "skipped": N, "details": {...}}

        Raises:
            AuthError, ProtocolError, TransportError: Первая ошибка сервера
        """
        return self._run("reconcile", zone, desired, self.plan(zone, ttl, current, desired))

    def update_reverse(self, zone: str, ttl: Optional[int], current: Device, desired: Device) -> Dict[str, Any]:
        """Только PTR записи основных адресов."""
        diff = self._comparator.compare_reverse(zone, self._ttl(ttl), current, desired)
        return self._run("update_reverse", zone, desired, [diff])

    def update_alias(self, zone: str, ttl: Optional[int], current: Device, desired: Device) -> Dict[str, Any]:
        """Только CNAME записи."""
        diff = self._comparator.compare_aliases(zone, self._ttl(ttl), current, desired)
        return self._run("update_alias", zone, desired, [diff])

    def update_mapping(self, zone: str, ttl: Optional[int], current: Device, desired: Device) -> Dict[str, Any]:
        """Только PTR записи вторичных адресов."""
        diff = self._comparator.compare_mapping(zone, self._ttl(ttl), current, desired)
        return self._run("update_mapping", zone, desired, [diff])

    def _run(
        self,
        operation: str,
        zone: str,
        desired: Device,
        diffs: List[ReconcileDiff],
    ) -> Dict[str, Any]:
        stats = ReconcileStats()
        op = OperationLog(operation=operation, device=desired.name, zone=zone).start()
        try:
            with LogContext(device=desired.name):
                for diff in diffs:
                    self._apply(diff, stats)
            op.success(**stats.stats, dry_run=self.dry_run)
        except ZoneInventoryError as e:
            op.failure(str(e))
            raise
        finally:
            op.log(logger)
        return stats.result()

    def _apply(self, diff: ReconcileDiff, stats: ReconcileStats) -> None:
        """Удаления, затем вставки одного шага."""
        if self.dry_run and diff.has_changes:
            logger.info(f"[DRY-RUN] {diff.format_detailed()}")

        for item in diff.to_skip:
            logger.debug(f"Пропуск {diff.object_type}: {item}")
            stats.add("skipped", diff.object_type, item)

        for item in diff.to_delete:
            if not self.dry_run:
                logger.info(f"Удаление {diff.object_type}: {item.record}", zone=item.zone)
                self.directory.remove_rrset(item.zone, [item.record])
            stats.add("deleted", diff.object_type, item)

        for item in diff.to_create:
            if not self.dry_run:
                logger.info(f"Вставка {diff.object_type}: {item.record}", zone=item.zone)
                self.directory.remove_rrset(item.zone, [item.record])
                self.directory.insert(item.zone, [item.record])
            stats.add("created", diff.object_type, item)
