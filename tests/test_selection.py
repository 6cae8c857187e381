"""Tests for the folder / sub-item selection state machine."""

from __future__ import annotations

import pytest

from claude_setup.scanner import list_children, list_top_level
from claude_setup.selection import SelectionWorkflow, State
from claude_setup.ui import SetupCancelled
from tests.conftest import ALL, CANCEL, ScriptedPrompter


def _workflow(package_root, claude_dir, prompter):
    return SelectionWorkflow(list_top_level(package_root), claude_dir, prompter)


def _scan_order(package_root):
    names = []
    for folder in list_top_level(package_root):
        children = list_children(folder.path)
        if not children:
            names.append(folder.name)
        names.extend(f"{folder.name}/{child.name}" for child in children)
    return names


class TestSelectionWorkflow:
    def test_defaults_select_everything(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[ALL, ALL], select=["continue"])

        tasks = _workflow(package_root, claude_dir, prompter).run()

        assert [t.name for t in tasks] == _scan_order(package_root)
        assert sorted(t.name for t in tasks) == ["agents", "skills/notes", "skills/web-search"]
        by_name = {t.name: t for t in tasks}
        assert by_name["agents"].dest == claude_dir / "agents"
        assert by_name["agents"].type == "directory"
        assert by_name["skills/notes"].dest == claude_dir / "skills" / "notes"
        assert by_name["skills/notes"].source == package_root / "skills" / "notes"
        assert not any(t.skip or t.backup for t in tasks)
        # Only skills/ has children, so only one sub-item prompt
        assert len(prompter.prompts("checkbox")) == 2

    def test_unselected_sub_items_are_omitted(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[ALL, ["notes"]], select=["continue"])

        tasks = _workflow(package_root, claude_dir, prompter).run()

        assert sorted(t.name for t in tasks) == ["agents", "skills/notes"]

    def test_empty_folder_selection_cancels(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[[]])

        workflow = _workflow(package_root, claude_dir, prompter)

        assert workflow.run() is None
        assert workflow.state is State.CANCEL

    def test_nothing_selected_inside_folders_cancels(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[["skills"], []])

        assert _workflow(package_root, claude_dir, prompter).run() is None

    def test_cancel_from_review(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[ALL, ALL], select=["cancel"])

        assert _workflow(package_root, claude_dir, prompter).run() is None

    def test_restart_drops_previous_selection(self, package_root, claude_dir):
        prompter = ScriptedPrompter(
            checkbox=[ALL, ALL, ["agents"]],
            select=["restart", "continue"],
        )
        workflow = _workflow(package_root, claude_dir, prompter)

        tasks = workflow.run()

        assert [t.name for t in tasks] == ["agents"]
        assert len(prompter.prompts("checkbox")) == 3
        assert len(prompter.prompts("select")) == 2

    def test_reset_clears_state(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[ALL, ALL], select=["continue"])
        workflow = _workflow(package_root, claude_dir, prompter)
        workflow.run()

        workflow.reset()

        assert workflow.tasks == []
        assert workflow.selected_folders == []
        assert workflow.state is State.SELECT_FOLDERS

    def test_same_choices_give_same_tasks(self, package_root, claude_dir):
        first = _workflow(package_root, claude_dir, ScriptedPrompter(checkbox=[ALL, ALL], select=["continue"])).run()
        second = _workflow(package_root, claude_dir, ScriptedPrompter(checkbox=[ALL, ALL], select=["continue"])).run()

        assert first == second

    def test_dismissed_prompt_propagates(self, package_root, claude_dir):
        prompter = ScriptedPrompter(checkbox=[CANCEL])

        with pytest.raises(SetupCancelled):
            _workflow(package_root, claude_dir, prompter).run()

    def test_task_order_follows_scan_not_answer_order(self, package_root, claude_dir):
        sub_items = [child.name for child in list_children(package_root / "skills")]
        prompter = ScriptedPrompter(checkbox=[ALL, list(reversed(sub_items))], select=["continue"])

        tasks = _workflow(package_root, claude_dir, prompter).run()

        assert [t.name for t in tasks] == _scan_order(package_root)

    def test_names_are_escaped_in_menu_labels(self, package_root, claude_dir):
        (package_root / "skills" / "notes[bold].md").write_text("notes")
        prompter = ScriptedPrompter(checkbox=[ALL, ALL], select=["continue"])

        tasks = _workflow(package_root, claude_dir, prompter).run()

        labels = prompter.checkbox_options[1]
        assert labels["notes[bold].md"].startswith(r"notes\[bold].md ")
        assert "skills/notes[bold].md" in [t.name for t in tasks]
