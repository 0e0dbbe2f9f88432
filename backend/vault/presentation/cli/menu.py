"""Interactive console menu for the vault.

A numbered menu loop over the RecordStore. Every store error is reported
with the operation that raised it and the loop continues; only option 9,
Ctrl-C or end of input leaves the menu.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from vault.application.services import RecordStore
from vault.domain.entities import Record, SortField, SortOrder
from vault.domain.exceptions import RecordValidationError, StorageError, VaultError
from vault.infrastructure.storage.snapshot_storage import SnapshotStorage

logger = logging.getLogger(__name__)

MENU = """
[bold]===== NodeVault =====[/bold]
1. Add Record
2. List Records
3. Update Record
4. Delete Record
5. Search Records
6. Sort Records
7. Export Data
8. View Vault Statistics
9. Exit
====================="""

_SORT_FIELDS = {"1": SortField.NAME, "2": SortField.CREATED_AT, "3": SortField.UPDATED_AT}
_SORT_ORDERS = {"1": SortOrder.ASC, "2": SortOrder.DESC}


def _day(record: Record, attribute: str = "created_at") -> str:
    return getattr(record, attribute).date().isoformat()


class VaultMenu:
    """Drives the RecordStore from console input.

    ``input_func`` is called (in a worker thread) with the prompt text and
    must return the user's answer; it defaults to ``console.input`` so
    background backups keep running while the menu waits.
    """

    def __init__(
        self,
        store: RecordStore,
        storage: SnapshotStorage,
        *,
        console: Console | None = None,
        input_func: Callable[[str], str] | None = None,
    ):
        self._store = store
        self._storage = storage
        self._console = console or Console()
        self._input = input_func or self._console.input
        self._actions: dict[str, Callable[[], Awaitable[None]]] = {
            "1": self.add_record,
            "2": self.list_records,
            "3": self.update_record,
            "4": self.delete_record,
            "5": self.search_records,
            "6": self.sort_records,
            "7": self.export_data,
            "8": self.show_statistics,
        }

    # ── Output helpers ──────────────────────────────────────────────

    def _ok(self, message: str) -> None:
        self._console.print(f"[green]✅ {escape(message)}[/green]")

    def _fail(self, message: str) -> None:
        self._console.print(f"[red]❌ {escape(message)}[/red]")

    def _report(self, operation: str, exc: VaultError) -> None:
        if isinstance(exc, RecordValidationError):
            self._fail(f"Error ({operation}): {exc.field} {exc.message}")
        else:
            self._fail(f"Error ({operation}): {exc}")

    def _records_table(self, title: str, records: list[Record], extra: str | None = None) -> Table:
        table = Table(title=title, show_lines=False)
        table.add_column("#", justify="right")
        table.add_column("ID", overflow="fold")
        table.add_column("Name")
        table.add_column("Value")
        table.add_column(extra or "Created")
        for index, record in enumerate(records, start=1):
            attribute = "updated_at" if extra == "Updated" else "created_at"
            table.add_row(
                str(index),
                Text(record.id),
                Text(record.name),
                Text(record.value),
                _day(record, attribute),
            )
        return table

    async def _ask(self, prompt: str) -> str:
        # Daemon reader thread: a pending prompt must not keep the process
        # alive after Ctrl-C cancels the loop.
        loop = asyncio.get_running_loop()
        answer: asyncio.Future[str] = loop.create_future()

        def _settle(value: str | None, error: BaseException | None) -> None:
            if answer.done():
                return
            if error is not None:
                answer.set_exception(error)
            else:
                answer.set_result(value or "")

        def _read() -> None:
            try:
                value = self._input(prompt)
            except BaseException as exc:
                loop.call_soon_threadsafe(_settle, None, exc)
            else:
                loop.call_soon_threadsafe(_settle, value, None)

        threading.Thread(target=_read, name="vault-menu-input", daemon=True).start()
        return await answer

    # ── Loop ────────────────────────────────────────────────────────

    async def run(self) -> None:
        self._console.rule("Welcome to NodeVault")
        while True:
            self._console.print(MENU)
            try:
                choice = (await self._ask("Choose option: ")).strip()
            except (EOFError, KeyboardInterrupt):
                choice = "9"

            if choice == "9":
                self._console.print("\n👋 Exiting NodeVault...")
                return
            action = self._actions.get(choice)
            if action is None:
                self._fail("Invalid option. Please choose 1-9.")
                continue
            try:
                await action()
            except VaultError as exc:
                # strict_reads lets read paths raise too
                self._report(action.__name__, exc)
            except (EOFError, KeyboardInterrupt):
                self._console.print("\n👋 Exiting NodeVault...")
                return

    # ── Actions ─────────────────────────────────────────────────────

    async def add_record(self) -> None:
        name = await self._ask("Enter name: ")
        value = await self._ask("Enter value: ")
        try:
            record = await self._store.add(name, value)
        except VaultError as exc:
            self._report("add", exc)
            return
        self._ok("Record added successfully!")
        self._console.print(f"ID: {record.id} | Name: {record.name}", markup=False)

    async def list_records(self) -> None:
        records = await self._store.list_records()
        if not records:
            self._console.print("No records found.")
            return
        self._console.print(self._records_table(f"📋 Total Records: {len(records)}", records))

    async def _ask_id(self, prompt: str) -> str | None:
        record_id = (await self._ask(prompt)).strip()
        if not record_id:
            self._fail("Invalid ID. Please enter a valid ID.")
            return None
        return record_id

    async def update_record(self) -> None:
        record_id = await self._ask_id("Enter record ID to update: ")
        if record_id is None:
            return
        name = await self._ask("New name: ")
        value = await self._ask("New value: ")
        try:
            updated = await self._store.update(record_id, name, value)
        except VaultError as exc:
            self._report("update", exc)
            return
        if updated is None:
            self._fail("Record not found.")
            return
        self._ok("Record updated!")
        self._console.print(f"ID: {updated.id} | New Name: {updated.name}", markup=False)

    async def delete_record(self) -> None:
        record_id = await self._ask_id("Enter record ID to delete: ")
        if record_id is None:
            return
        try:
            deleted = await self._store.delete(record_id)
        except VaultError as exc:
            self._report("delete", exc)
            return
        if deleted is None:
            self._fail("Record not found.")
            return
        self._console.print("🗑️ Record deleted!")
        self._console.print(f"Deleted: ID {deleted.id} | Name: {deleted.name}", markup=False)

    async def search_records(self) -> None:
        keyword = await self._ask("Enter search keyword: ")
        matches = await self._store.search(keyword)
        if not matches:
            self._console.print("No records found.")
            return
        self._console.print(
            self._records_table(f"Found {len(matches)} matching record(s)", matches)
        )

    async def sort_records(self) -> None:
        self._console.print(
            "\n=== Sort Options ===\n"
            "1. Sort by Name\n"
            "2. Sort by Creation Date\n"
            "3. Sort by Update Date"
        )
        field = _SORT_FIELDS.get((await self._ask("Choose field to sort by (1-3): ")).strip())
        if field is None:
            self._fail("Invalid option.")
            return
        self._console.print(
            "\n=== Sort Order ===\n"
            "1. Ascending (A-Z, Oldest first)\n"
            "2. Descending (Z-A, Newest first)"
        )
        order = _SORT_ORDERS.get((await self._ask("Choose order (1-2): ")).strip())
        if order is None:
            self._fail("Invalid option.")
            return

        try:
            records = await self._store.sort(field, order)
        except VaultError as exc:
            self._report("sort", exc)
            return
        label = "Ascending" if order is SortOrder.ASC else "Descending"
        if not records:
            self._console.print("No records to display.")
            return
        extra = "Updated" if field is SortField.UPDATED_AT else None
        self._console.print(
            self._records_table(f"Sorted Records (by {field.value}, {label})", records, extra)
        )

    async def export_data(self) -> None:
        snapshot = await self._store.export_snapshot()
        try:
            path = await asyncio.to_thread(self._storage.write_export, snapshot)
        except StorageError as exc:
            logger.error("Export failed: %s", exc)
            self._report("export", exc)
            return
        self._ok(f"Data exported successfully to {path.name}")
        self._console.print(f"📁 Location: {path.resolve()}", markup=False)
        self._console.print(f"📊 Total records exported: {len(snapshot.records)}")

    async def show_statistics(self) -> None:
        stats = await self._store.statistics()
        self._console.rule("VAULT STATISTICS")
        if stats.message:
            self._console.print(stats.message)
            return
        self._console.print(f"Total Records: {stats.total_records}")
        self._console.print(f"Last Modified: {stats.last_modified:%Y-%m-%d %H:%M:%S}")
        self._console.print(
            f"Longest Name: {stats.longest_name} ({stats.longest_name_length} characters)",
            markup=False,
        )
        self._console.print(f"Earliest Record: {stats.earliest_record}")
        self._console.print(f"Latest Record: {stats.latest_record}")
        self._console.print(f"Average Name Length: {stats.average_name_length} characters")
        self._console.print(f"Unique Names: {stats.unique_names}")
