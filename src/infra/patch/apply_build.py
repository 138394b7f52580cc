"""Patch-apply-and-build workflow.

Reverts the vendored repository, lets the operator pick a version, applies
the patch and builds the compose images. The flow is a small finite-state
machine:

    VALIDATE -> CONFIRM_REVERT -> REVERT -> SELECT_VERSION -> CHECKOUT
             -> APPLY_PATCH -> BUILD -> DONE

Any step may end in ABORTED. Declining the revert confirmation aborts with
UserDeclined (a clean exit); failed external commands abort with the
error that describes them. Nothing is retried.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from src.infra.config import OpsSettings
from src.infra.constants import DEFAULT_CONSTANTS
from src.infra.errors import (
    AmbiguousRecovery,
    ExternalCommandFailed,
    OperationError,
    PreconditionMissing,
    UserDeclined,
)
from src.infra.patch.extract import require_repository
from src.infra.patch.selection import (
    VersionCandidate,
    build_candidate_names,
    candidate_markers,
    resolve_selection,
)
from src.infra.shell import ShellCommands
from src.utils.console_like import OperatorConsole, coalesce_console

BUILD_TROUBLESHOOTING = """Common troubleshooting steps:
1. Check if Docker daemon is running
2. Ensure you have sufficient disk space
3. Check docker-compose.yml for any issues
4. Try running: docker system prune -f"""

PATCH_GUIDANCE = """You may need to:
1. Check if the patch is compatible with the current codebase
2. Manually resolve conflicts
3. Update the patch file"""


class WorkflowState(str, Enum):
    VALIDATE = "validate"
    CONFIRM_REVERT = "confirm_revert"
    REVERT = "revert"
    SELECT_VERSION = "select_version"
    CHECKOUT = "checkout"
    APPLY_PATCH = "apply_patch"
    BUILD = "build"
    DONE = "done"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset({WorkflowState.DONE, WorkflowState.ABORTED})


class VersionOutcome(str, Enum):
    """What the checkout step did with the repository."""

    STAYED_ON_HEAD = "stayed_on_head"
    ALREADY_ON_TAG = "already_on_tag"
    CHECKED_OUT_TAG = "checked_out_tag"
    MAINLINE = "mainline"


class PatchMethod(str, Enum):
    STRICT = "strict"
    THREE_WAY = "3way"


@dataclass
class WorkflowResult:
    """Final state of one workflow run.

    `error` is set whenever `state` is ABORTED.
    """

    state: WorkflowState
    history: list[WorkflowState] = field(default_factory=list)
    selected_version: str | None = None
    version_outcome: VersionOutcome | None = None
    patch_method: PatchMethod | None = None
    compose_command: list[str] | None = None
    changed_files: list[str] = field(default_factory=list)
    error: OperationError | None = None

    @property
    def succeeded(self) -> bool:
        return self.state is WorkflowState.DONE


class PatchApplyWorkflow:
    """Revert, select version, apply patch, build images.

    Each state has one handler returning the next state; the machine runs
    until it reaches DONE or ABORTED.
    """

    def __init__(
        self,
        commands: ShellCommands,
        settings: OpsSettings,
        console: OperatorConsole | None = None,
        *,
        patch_file: str | None = None,
        fetch: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the workflow.

        Args:
            commands: Shell commands bound to the project directory
            settings: Operator settings
            console: Output console and operator prompts
            patch_file: Patch to apply (default: the configured default patch file)
            fetch: Run `git fetch --all --tags` before listing tags
            clock: Time source for the HEAD row of the version menu
        """
        self._commands = commands
        self._git = commands.git
        self._settings = settings
        self._console = coalesce_console(console)
        self._fetch = fetch
        self._clock = clock

        self.project_root = commands.project_root
        self.patch_name = patch_file or settings.default_patch_file
        self.patch_path = (self.project_root / self.patch_name).resolve()

        self.state = WorkflowState.VALIDATE
        self._result = WorkflowResult(state=self.state)
        self._current_tag: str | None = None
        self._fallback_to_mainline = False

        self._handlers: dict[WorkflowState, Callable[[], WorkflowState]] = {
            WorkflowState.VALIDATE: self._validate,
            WorkflowState.CONFIRM_REVERT: self._confirm_revert,
            WorkflowState.REVERT: self._revert,
            WorkflowState.SELECT_VERSION: self._select_version,
            WorkflowState.CHECKOUT: self._checkout,
            WorkflowState.APPLY_PATCH: self._apply_patch,
            WorkflowState.BUILD: self._build,
        }

    def run(self) -> WorkflowResult:
        """Drive the state machine to a terminal state.

        Returns:
            WorkflowResult; errors are captured in `error`, never raised
        """
        while self.state not in TERMINAL_STATES:
            self._result.history.append(self.state)
            try:
                self.state = self._handlers[self.state]()
            except OperationError as exc:
                self._result.error = exc
                self.state = WorkflowState.ABORTED

        self._result.history.append(self.state)
        self._result.state = self.state
        if self.state is WorkflowState.DONE:
            self._print_summary()
        return self._result

    # =========================================================================
    # State handlers
    # =========================================================================

    def _validate(self) -> WorkflowState:
        self._console.step("Validating environment...")

        require_repository(self._git.repo_path)

        if not self.patch_path.is_file():
            available = sorted(p.name for p in self.project_root.glob("*.patch"))
            raise PreconditionMissing(
                f"Patch file '{self.patch_name}' does not exist!",
                details="Available patch files:\n"
                + ("\n".join(f"  {name}" for name in available) or "  No patch files found"),
            )

        compose_file = self.project_root / self._settings.compose_file
        if not compose_file.is_file():
            raise PreconditionMissing(
                f"Docker compose file '{self._settings.compose_file}' does not exist!"
            )

        self._console.ok("Environment validation completed")
        return WorkflowState.CONFIRM_REVERT

    def _confirm_revert(self) -> WorkflowState:
        self._console.step("Checking current repository status...")
        status = self._git.get_status()
        if status.porcelain:
            self._console.print("Current git status:")
            self._console.print(escape(status.porcelain))

        if not self._git.has_uncommitted_changes():
            self._console.ok("No uncommitted changes found")
            return WorkflowState.REVERT

        self._console.warn("Found uncommitted changes in the repository")
        self._console.print("The following files will be reverted:")
        for path in self._git.changed_files():
            self._console.print(f"  {escape(path)}")

        if not self._console.confirm("Do you want to continue and lose these changes?"):
            raise UserDeclined("Operation cancelled by user")
        return WorkflowState.REVERT

    def _revert(self) -> WorkflowState:
        self._console.step("Reverting all changes...")

        # Both are best effort, e.g. on a repository without commits.
        self._git.unstage_all()
        self._git.discard_tracked_changes()

        untracked = self._git.untracked_files()
        if untracked:
            self._console.warn("Found untracked files:")
            for path in untracked:
                self._console.print(f"  {escape(path)}")
            if self._console.confirm("Do you want to remove these untracked files?"):
                cleaned = self._git.clean_untracked()
                if not cleaned.success:
                    raise ExternalCommandFailed(
                        "Failed to remove untracked files", details=cleaned.output or None
                    )
                self._console.ok("Untracked files removed")
            else:
                self._console.warn("Untracked files kept")

        self._console.ok("All changes reverted")
        return WorkflowState.SELECT_VERSION

    def _select_version(self) -> WorkflowState:
        if self._fetch:
            self._console.step("Fetching tags from remote...")
            fetched = self._git.fetch_all_tags()
            if not fetched.success:
                raise ExternalCommandFailed(
                    "Failed to fetch tags from remote", details=fetched.output or None
                )

        self._current_tag = self._git.current_tag()
        if self._current_tag:
            self._console.step(f"Currently on tag: {self._current_tag}")
        else:
            commit = self._git.head_commit() or ""
            branch = self._git.current_branch()
            self._console.step(f"Currently on branch: {branch} (commit: {commit[:8]})")

        self._console.step("Getting available tags...")
        tags = self._git.list_tags_newest_first()
        if not tags:
            self._console.error("No tags found in repository")
            self._console.warn(
                f"Falling back to latest {self._settings.mainline_branch} branch"
            )
            self._fallback_to_mainline = True
            return WorkflowState.CHECKOUT

        candidates = self._build_candidates(tags)
        self._show_candidates(candidates)

        answer = self._console.ask(f"Enter number [1-{len(candidates)}]: ")
        index, valid = resolve_selection(answer, len(candidates))
        if not valid:
            self._console.error("Invalid selection. Using HEAD (1).")

        self._result.selected_version = candidates[index].name
        return WorkflowState.CHECKOUT

    def _checkout(self) -> WorkflowState:
        if self._fallback_to_mainline:
            branch = self._settings.mainline_branch
            checked_out = self._git.checkout(branch)
            pulled = (
                self._git.pull(self._settings.remote, branch)
                if checked_out.success
                else checked_out
            )
            if not pulled.success:
                raise ExternalCommandFailed(
                    f"Failed to checkout {branch} branch", details=pulled.output or None
                )
            self._console.ok(f"Checked out latest {branch} branch")
            self._result.version_outcome = VersionOutcome.MAINLINE
            return WorkflowState.APPLY_PATCH

        selected = self._result.selected_version
        if selected is None or selected == DEFAULT_CONSTANTS.HEAD_SENTINEL:
            self._console.ok("Staying on current HEAD (no checkout needed)")
            self._result.version_outcome = VersionOutcome.STAYED_ON_HEAD
        elif selected == self._current_tag:
            self._console.ok(f"Already on selected tag: {selected}")
            self._result.version_outcome = VersionOutcome.ALREADY_ON_TAG
        else:
            self._console.step(f"Checking out tag: {selected}")
            result = self._git.checkout(selected)
            if not result.success:
                raise ExternalCommandFailed(
                    f"Failed to checkout tag: {selected}", details=result.output or None
                )
            self._console.ok(f"Successfully checked out tag: {selected}")
            self._result.version_outcome = VersionOutcome.CHECKED_OUT_TAG
        return WorkflowState.APPLY_PATCH

    def _apply_patch(self) -> WorkflowState:
        self._console.step(f"Applying patch: {self.patch_name}")
        self._console.step(f"Using patch file: {self.patch_path}")

        if self._git.apply_check(self.patch_path).success:
            self._console.ok("Patch validation successful")
            applied = self._git.apply(self.patch_path)
            if not applied.success:
                raise ExternalCommandFailed(
                    "Failed to apply patch", details=applied.output or None
                )
            self._console.ok("Patch applied successfully")
            self._result.patch_method = PatchMethod.STRICT
        else:
            self._console.warn(
                "Patch validation failed. Attempting to apply with 3-way merge..."
            )
            merged = self._git.apply_three_way(self.patch_path)
            if not merged.success:
                details = PATCH_GUIDANCE
                if merged.output:
                    details = f"{merged.output}\n\n{PATCH_GUIDANCE}"
                raise AmbiguousRecovery("Failed to apply patch", details=details)
            self._console.ok("Patch applied with 3-way merge")
            self._result.patch_method = PatchMethod.THREE_WAY

        self._result.changed_files = self._git.changed_files()
        self._console.step("Patch applied. Changed files:")
        for path in self._result.changed_files:
            self._console.print(f"  {escape(path)}")
        return WorkflowState.BUILD

    def _build(self) -> WorkflowState:
        self._console.step("Building Docker images with docker compose...")

        compose_cmd = self._commands.compose.detect_compose_command()
        if compose_cmd is None:
            raise ExternalCommandFailed(
                "No valid docker compose command found",
                details="Neither `docker compose` nor `docker-compose` is available. "
                "Please install Docker to build the images.",
            )
        self._result.compose_command = compose_cmd
        self._console.step(f"Using command: {' '.join(compose_cmd)}")

        self._console.step("Starting Docker build process...")
        self._console.print("[dim]This may take several minutes...[/dim]")
        built = self._commands.compose.build(compose_cmd)
        if not built.success:
            raise ExternalCommandFailed("Docker build failed", details=BUILD_TROUBLESHOOTING)

        self._console.ok("Docker images built successfully")
        return WorkflowState.DONE

    # =========================================================================
    # Helpers
    # =========================================================================

    def _build_candidates(self, tags: list[str]) -> list[VersionCandidate]:
        names = build_candidate_names(tags, self._settings.max_candidates)
        candidates = []
        for index, name in enumerate(names):
            if name == DEFAULT_CONSTANTS.HEAD_SENTINEL:
                date = self._clock().astimezone().strftime(DEFAULT_CONSTANTS.HEAD_DATE_FORMAT)
            else:
                date = self._git.tag_date(name) or DEFAULT_CONSTANTS.UNKNOWN_DATE
            candidates.append(
                VersionCandidate(
                    name=name,
                    date=date,
                    markers=candidate_markers(name, index, self._current_tag),
                )
            )
        return candidates

    def _show_candidates(self, candidates: list[VersionCandidate]) -> None:
        table = Table(
            title=f"Available options (HEAD + last {len(candidates) - 1} tags, sorted by date)"
        )
        table.add_column("#", justify="right", style="bold")
        table.add_column("Version", style="cyan")
        table.add_column("Date", style="dim")
        table.add_column("", style="green")
        for number, candidate in enumerate(candidates, 1):
            table.add_row(
                str(number),
                escape(candidate.name),
                candidate.date,
                " ".join(candidate.markers),
            )
        self._console.print(table)
        self._console.print("Select an option to checkout (default: 1 - HEAD):")

    def _print_summary(self) -> None:
        result = self._result
        repo = self._settings.repo_path
        compose = " ".join(result.compose_command or ["docker", "compose"])

        self._console.ok("🎉 All operations completed successfully!")
        self._console.print("\n[bold]Summary of what was done:[/bold]")
        self._console.print(f"  ✅ Reverted all changes in ./{repo}/ repository")
        if result.version_outcome is VersionOutcome.MAINLINE:
            self._console.print(f"  ✅ Updated to latest {self._settings.mainline_branch} branch")
        elif result.version_outcome is VersionOutcome.STAYED_ON_HEAD:
            self._console.print("  ✅ Stayed on current HEAD")
        else:
            self._console.print(f"  ✅ Checked out tag: {result.selected_version}")
        method = " (3-way merge)" if result.patch_method is PatchMethod.THREE_WAY else ""
        self._console.print(f"  ✅ Applied patch: {self.patch_name}{method}")
        self._console.print(f"  ✅ Built Docker images using {compose}")
        self._console.print("\nYour Docker images are now ready to use!")
        self._console.print(f"You can start the services with:\n  {compose} up -d")
        self._console.print(f"\nTo see the applied changes:\n  cd {repo} && git diff")
