"""Unit tests for the interactive console menu."""

import io

import pytest
from rich.console import Console

from vault.application.services import RecordStore
from vault.infrastructure.storage.snapshot_storage import SnapshotStorage
from vault.presentation.cli.menu import VaultMenu


class ScriptedInput:
    """Feeds canned answers to the menu; raises EOFError once exhausted."""

    def __init__(self, *answers: str):
        self.answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)


def _menu(store: RecordStore, tmp_path, *answers: str) -> tuple[VaultMenu, io.StringIO]:
    output = io.StringIO()
    console = Console(file=output, width=200, color_system=None)
    storage = SnapshotStorage(str(tmp_path / "backups"), str(tmp_path / "export.txt"))
    menu = VaultMenu(store, storage, console=console, input_func=ScriptedInput(*answers))
    return menu, output


@pytest.mark.asyncio
async def test_add_then_list(store: RecordStore, tmp_path):
    menu, output = _menu(store, tmp_path, "1", "alpha", "first", "2", "9")

    await menu.run()

    text = output.getvalue()
    assert "Record added successfully!" in text
    assert "ID: rec-1 | Name: alpha" in text
    assert "Total Records: 1" in text
    assert "Exiting NodeVault" in text


@pytest.mark.asyncio
async def test_validation_error_is_reported_and_loop_continues(store: RecordStore, tmp_path):
    menu, output = _menu(store, tmp_path, "1", "   ", "v", "8", "9")

    await menu.run()

    text = output.getvalue()
    assert "Error (add): name" in text
    assert "No records to analyze" in text
    assert await store.list_records() == []


@pytest.mark.asyncio
async def test_invalid_option_and_end_of_input(store: RecordStore, tmp_path):
    menu, output = _menu(store, tmp_path, "42")

    await menu.run()

    text = output.getvalue()
    assert "Invalid option. Please choose 1-9." in text
    assert "Exiting NodeVault" in text


@pytest.mark.asyncio
async def test_update_and_delete_missing_record(store: RecordStore, tmp_path):
    menu, output = _menu(store, tmp_path, "3", "nope", "n", "v", "4", "nope", "4", "  ", "9")

    await menu.run()

    text = output.getvalue()
    assert text.count("Record not found.") == 2
    assert "Invalid ID. Please enter a valid ID." in text


@pytest.mark.asyncio
async def test_update_and_delete_existing_record(store: RecordStore, tmp_path):
    record = await store.add("alpha", "1")
    menu, output = _menu(
        store, tmp_path, "3", record.id, "beta", "2", "4", record.id, "9"
    )

    await menu.run()

    text = output.getvalue()
    assert "Record updated!" in text
    assert f"ID: {record.id} | New Name: beta" in text
    assert f"Deleted: ID {record.id} | Name: beta" in text
    assert await store.get(record.id) is None


@pytest.mark.asyncio
async def test_search_and_sort(store: RecordStore, tmp_path, clock):
    await store.add("banana", "yellow")
    clock.advance(seconds=1)
    await store.add("apple", "red")
    menu, output = _menu(store, tmp_path, "5", "APP", "6", "1", "2", "6", "7", "9")

    await menu.run()

    text = output.getvalue()
    assert "Found 1 matching record(s)" in text
    assert "Sorted Records (by name, Descending)" in text
    assert text.index("banana", text.index("Sorted Records")) < text.index(
        "apple", text.index("Sorted Records")
    )
    assert text.count("Invalid option.") == 1


@pytest.mark.asyncio
async def test_export_writes_file(store: RecordStore, tmp_path):
    await store.add("alpha", "1")
    menu, output = _menu(store, tmp_path, "7", "9")

    await menu.run()

    text = output.getvalue()
    assert "Data exported successfully to export.txt" in text
    assert "Total records exported: 1" in text
    exported = (tmp_path / "export.txt").read_text("utf-8")
    assert "Name: alpha" in exported


@pytest.mark.asyncio
async def test_statistics_are_printed(store: RecordStore, tmp_path):
    await store.add("alpha", "1")
    await store.add("alphabet", "2")
    menu, output = _menu(store, tmp_path, "8", "9")

    await menu.run()

    text = output.getvalue()
    assert "Total Records: 2" in text
    assert "Longest Name: alphabet (8 characters)" in text
    assert "Unique Names: 2" in text


@pytest.mark.asyncio
async def test_export_failure_is_reported(store: RecordStore, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", "utf-8")
    output = io.StringIO()
    storage = SnapshotStorage(str(tmp_path / "backups"), str(blocker / "export.txt"))
    menu = VaultMenu(
        store,
        storage,
        console=Console(file=output, width=200, color_system=None),
        input_func=ScriptedInput("7", "9"),
    )

    await menu.run()

    text = output.getvalue()
    assert "Error (export): Storage export failed" in text
    assert "Exiting NodeVault" in text
