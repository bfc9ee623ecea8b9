"""Deployment pipeline.

Orchestrates one deployment of a contract account:

    INIT -> CONFIRMING -> (CLEAR_ONLY | RESOLVING -> DIFFING -> RISK_CHECKING
    [-> RISK_CONFIRMING]) -> SUBMITTING_CODE -> SUBMITTING_SCHEMA -> ENABLING
    -> CLEANUP -> DONE

Declining a confirmation ends the run in ABORTED, passing through CLEANUP
once artifacts were resolved. A deployed schema that cannot be parsed is
not diffed; the operator is warned and asked to confirm instead.
Resolution failures are fatal and propagate; a rejected submission is
reported and the pipeline moves on to the next operation. Whatever
happens, a staging directory created for a remote source is removed before
`run` returns or raises.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

import structlog
from pydantic import BaseModel, ConfigDict, Field, model_validator

from chainship_core.artifacts import ArtifactResolver, ArtifactSet
from chainship_core.chain.models import Action, PermissionLevel, TransactionReceipt
from chainship_core.errors import (
    InvalidSchema,
    NetworkMismatch,
    SubmissionFailed,
    UnreadableSchema,
)
from chainship_core.hints import classify_error
from chainship_core.inline import enable_inline
from chainship_core.observability import span
from chainship_core.reporting import NullReporter, Reporter
from chainship_core.risk import DATA_CORRUPTION_NOTICE, RiskAssessment
from chainship_core.schema.diff import DiffResult, diff_schemas
from chainship_core.schema.models import InterfaceSchema
from chainship_core.schema.serializer import serialize_schema_hex

if TYPE_CHECKING:
    from chainship_core.chain.protocol import ChainReader, ChainWriter
    from chainship_core.config import NetworkConfig

logger = structlog.get_logger(__name__)

NO_ISSUE_MESSAGE = "No issue with the existing contract found. Continuing."
UNREADABLE_SCHEMA_NOTICE = "Tables holding data could not be checked."


class PipelineState(str, Enum):
    """States of a deployment run. DONE and ABORTED are terminal."""

    INIT = "init"
    CONFIRMING = "confirming"
    CLEAR_ONLY = "clear_only"
    RESOLVING = "resolving"
    DIFFING = "diffing"
    RISK_CHECKING = "risk_checking"
    RISK_CONFIRMING = "risk_confirming"
    SUBMITTING_CODE = "submitting_code"
    SUBMITTING_SCHEMA = "submitting_schema"
    ENABLING = "enabling"
    CLEANUP = "cleanup"
    DONE = "done"
    ABORTED = "aborted"


class Confirmer(Protocol):
    """Asks the operator a yes/no question. Anything but an explicit yes is no."""

    def confirm(self, message: str) -> bool: ...


class DeploymentRequest(BaseModel):
    """What to deploy, where, and how.

    Attributes:
        account: Target contract account.
        source: Local directory or GitHub folder URL (unused when clearing).
        clear: Remove the code and schema instead of deploying.
        code_only: Submit the bytecode only.
        schema_only: Submit the schema only.
        enable_inline: Grant `eosio.code` on the account afterwards.
        pre_confirmed: Skip the initial confirmation prompt.
        expected_network: Network the deployment is meant for, if pinned.

    Example:
        >>> request = DeploymentRequest(account="mytoken", source="./build/token")
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    account: str = Field(..., min_length=1, description="Target account")
    source: str | None = Field(default=None, description="Artifact source")
    clear: bool = Field(default=False, description="Clear code and schema")
    code_only: bool = Field(default=False, description="Submit bytecode only")
    schema_only: bool = Field(default=False, description="Submit schema only")
    enable_inline: bool = Field(default=True, description="Enable inline actions")
    pre_confirmed: bool = Field(default=False, description="Skip first confirmation")
    expected_network: str | None = Field(default=None, description="Pinned network")

    @model_validator(mode="after")
    def source_required_unless_clearing(self) -> DeploymentRequest:
        if not self.clear and not self.source:
            raise ValueError("source is required unless clearing the contract")
        return self


class SubmissionResult(BaseModel):
    """Outcome of one submitted operation.

    Attributes:
        operation: Operation name ("setcode" or "setabi").
        success: Whether the chain accepted it.
        transaction_id: Id of the accepted transaction.
        explorer_url: Explorer link of the transaction, if the network has one.
        error: Operator-facing error text on failure.
        hint: Suggested fix on failure, if one is known.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    operation: str
    success: bool
    transaction_id: str | None = None
    explorer_url: str | None = None
    error: str | None = None
    hint: str | None = None


class DeploymentResult(BaseModel):
    """Everything a deployment run produced.

    `artifacts` keeps the resolved paths for reference; a staging directory
    they point into has already been removed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    state: PipelineState
    history: tuple[PipelineState, ...] = ()
    artifacts: ArtifactSet | None = None
    diff: DiffResult | None = None
    risk: RiskAssessment | None = None
    submissions: tuple[SubmissionResult, ...] = ()
    inline_receipt: TransactionReceipt | None = None

    @property
    def aborted(self) -> bool:
        return self.state == PipelineState.ABORTED

    @property
    def failed_operations(self) -> list[str]:
        return [s.operation for s in self.submissions if not s.success]


@dataclass
class _Run:
    """Mutable bookkeeping of one pipeline run."""

    request: DeploymentRequest
    history: list[PipelineState] = field(default_factory=lambda: [PipelineState.INIT])
    staging: Path | None = None
    artifacts: ArtifactSet | None = None
    code: bytes = b""
    schema_hex: str = ""
    diff: DiffResult | None = None
    risk: RiskAssessment | None = None
    submissions: list[SubmissionResult] = field(default_factory=list)
    inline_receipt: TransactionReceipt | None = None

    @property
    def state(self) -> PipelineState:
        return self.history[-1]

    def result(self) -> DeploymentResult:
        return DeploymentResult(
            state=self.state,
            history=tuple(self.history),
            artifacts=self.artifacts,
            diff=self.diff,
            risk=self.risk,
            submissions=tuple(self.submissions),
            inline_receipt=self.inline_receipt,
        )


class DeploymentPipeline:
    """Runs deployments against one network.

    Attributes:
        reader: Chain read API.
        writer: Chain write API.
        network: Active network.
        resolver: Artifact resolver.
        confirmer: Operator prompts.
        reporter: Operator-facing progress messages.

    Example:
        >>> pipeline = DeploymentPipeline(reader, writer, network, confirmer=confirmer)
        >>> result = pipeline.run(DeploymentRequest(account="mytoken", source="./build"))
        >>> result.state
        <PipelineState.DONE: 'done'>
    """

    def __init__(
        self,
        reader: ChainReader,
        writer: ChainWriter,
        network: NetworkConfig,
        *,
        confirmer: Confirmer,
        resolver: ArtifactResolver | None = None,
        reporter: Reporter | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            reader: Chain read API.
            writer: Chain write API.
            network: Active network (system account, explorer link).
            confirmer: Answers the confirmation prompts.
            resolver: Artifact resolver (a default one sharing `reporter` if
                omitted).
            reporter: Receives progress messages.
        """
        self.reader = reader
        self.writer = writer
        self.network = network
        self.confirmer = confirmer
        self.reporter: Reporter = reporter or NullReporter()
        self.resolver = resolver or ArtifactResolver(reporter=self.reporter)
        self._log = logger.bind(component="deployment_pipeline", network=network.chain)

    def run(self, request: DeploymentRequest) -> DeploymentResult:
        """Run one deployment.

        Args:
            request: Deployment request.

        Returns:
            DeploymentResult; `state` is DONE or ABORTED.

        Raises:
            NetworkMismatch: If the request is pinned to another network.
            ArtifactError: If the artifacts cannot be resolved or parsed.
        """
        run = _Run(request=request)
        log = self._log.bind(account=request.account)
        log.info(
            "deployment_started",
            source=request.source,
            clear=request.clear,
            code_only=request.code_only,
            schema_only=request.schema_only,
        )

        if request.expected_network and request.expected_network != self.network.chain:
            raise NetworkMismatch(current=self.network.chain, expected=request.expected_network)

        try:
            with span("pipeline.run", attributes={"chainship.account": request.account}):
                if self._prepare(run):
                    self._submit(run)
                    self._transition(run, PipelineState.CLEANUP)
                    self._transition(run, PipelineState.DONE)
                else:
                    if PipelineState.RESOLVING in run.history:
                        self._transition(run, PipelineState.CLEANUP)
                    self._transition(run, PipelineState.ABORTED)
        finally:
            self._remove_staging(run)

        log.info(
            "deployment_finished",
            state=run.state.value,
            failed_operations=[s.operation for s in run.submissions if not s.success],
        )
        return run.result()

    def _transition(self, run: _Run, state: PipelineState) -> None:
        self._log.debug("pipeline_transition", source=run.state.value, target=state.value)
        run.history.append(state)

    def _prepare(self, run: _Run) -> bool:
        """Walk the pre-submission states. Returns False when the operator declines."""
        request = run.request

        self._transition(run, PipelineState.CONFIRMING)
        if not request.pre_confirmed:
            question = f"You are about to deploy to '{request.account}'. Continue?"
            if not self.confirmer.confirm(question):
                self._log.info("deployment_declined", account=request.account)
                return False

        if request.clear:
            self._transition(run, PipelineState.CLEAR_ONLY)
            return True

        candidate = self._resolve(run)

        self._transition(run, PipelineState.DIFFING)
        self.reporter.warning("Checking for existing contract...")
        try:
            existing = self._deployed_schema(request.account)
        except UnreadableSchema as e:
            return self._confirm_unreadable(run, e)
        if existing is None:
            self.reporter.success(NO_ISSUE_MESSAGE)
            return True
        run.diff = diff_schemas(existing, candidate)

        self._transition(run, PipelineState.RISK_CHECKING)
        with span("pipeline.assess_risk", attributes={"chainship.account": request.account}):
            run.risk = RiskAssessment.from_diff(self.reader, request.account, run.diff)

        if not run.risk.has_risk:
            self.reporter.success(NO_ISSUE_MESSAGE)
            return True

        self._transition(run, PipelineState.RISK_CONFIRMING)
        self.reporter.error(f"{run.risk.warning_text()}{DATA_CORRUPTION_NOTICE}")
        if not self.confirmer.confirm("Are you sure you want to continue?"):
            self._log.info(
                "deployment_declined",
                account=request.account,
                removed=list(run.risk.removed),
                updated=list(run.risk.updated),
            )
            return False
        return True

    def _resolve(self, run: _Run) -> InterfaceSchema:
        """Resolve and load the artifacts. The candidate schema is returned."""
        source = run.request.source or ""
        self._transition(run, PipelineState.RESOLVING)

        with span("pipeline.resolve", attributes={"chainship.source": source}):
            run.staging = self.resolver.stage(source)
            run.artifacts = self.resolver.locate(run.staging or Path(source), run.staging)

        run.code = run.artifacts.bytecode_path.read_bytes()
        candidate = InterfaceSchema.from_file(run.artifacts.schema_path)
        try:
            run.schema_hex = serialize_schema_hex(candidate)
        except ValueError as e:
            raise InvalidSchema(str(run.artifacts.schema_path), internal_details=str(e)) from e
        return candidate

    def _deployed_schema(self, account: str) -> InterfaceSchema | None:
        """Fetch the deployed schema.

        Any failure counts as none deployed, except a schema that exists but
        cannot be parsed.
        """
        try:
            return self.reader.get_abi(account)
        except UnreadableSchema:
            raise
        except Exception as e:
            self._log.debug("deployed_schema_unavailable", account=account, error=str(e))
            return None

    def _confirm_unreadable(self, run: _Run, error: UnreadableSchema) -> bool:
        """Ask before deploying over a schema that could not be diffed."""
        self._transition(run, PipelineState.RISK_CONFIRMING)
        self.reporter.warning(f"{error.user_message}. {UNREADABLE_SCHEMA_NOTICE}")
        if not self.confirmer.confirm("Are you sure you want to continue?"):
            self._log.info(
                "deployment_declined",
                account=run.request.account,
                reason="unreadable_schema",
            )
            return False
        return True

    def _submit(self, run: _Run) -> None:
        request = run.request
        verb = "Cleared" if request.clear else "Deployed"

        if not request.schema_only:
            self._transition(run, PipelineState.SUBMITTING_CODE)
            run.submissions.append(
                self._submit_operation(
                    request.account,
                    "setcode",
                    {"vmtype": 0, "vmversion": 0, "code": run.code.hex()},
                    success_message=f"WASM Successfully {verb}:",
                )
            )

        if not request.code_only:
            self._transition(run, PipelineState.SUBMITTING_SCHEMA)
            run.submissions.append(
                self._submit_operation(
                    request.account,
                    "setabi",
                    {"abi": run.schema_hex},
                    success_message=f"ABI Successfully {verb}:",
                )
            )

        if request.enable_inline:
            self._transition(run, PipelineState.ENABLING)
            run.inline_receipt = enable_inline(
                self.reader,
                self.writer,
                request.account,
                system_account=self.network.system_account,
                reporter=self.reporter,
            )

    def _transact(self, action: Action) -> TransactionReceipt:
        try:
            with span(f"pipeline.{action.name}", attributes={"chainship.account": action.account}):
                return self.writer.transact([action])
        except Exception as e:
            raise SubmissionFailed(action.name, e) from e

    def _submit_operation(
        self,
        account: str,
        operation: str,
        data: dict[str, Any],
        *,
        success_message: str,
    ) -> SubmissionResult:
        """Submit one system operation; a rejection is reported, not raised."""
        action = Action(
            account=self.network.system_account,
            name=operation,
            data={"account": account, **data},
            authorization=[PermissionLevel(actor=account, permission="active")],
        )

        try:
            receipt = self._transact(action)
        except SubmissionFailed as e:
            classified = classify_error(e.cause)
            self._log.warning(
                "submission_failed",
                account=account,
                operation=operation,
                error=classified.text,
            )
            self.reporter.error(classified.text)
            if classified.hint:
                self.reporter.hint(classified.hint)
            return SubmissionResult(
                operation=operation,
                success=False,
                error=classified.text,
                hint=classified.hint,
            )

        explorer_url = self.network.transaction_url(receipt.transaction_id)
        self._log.info(
            "submission_accepted",
            account=account,
            operation=operation,
            transaction_id=receipt.transaction_id,
        )
        self.reporter.success(success_message)
        if explorer_url:
            self.reporter.link("View TX", explorer_url)
        return SubmissionResult(
            operation=operation,
            success=True,
            transaction_id=receipt.transaction_id,
            explorer_url=explorer_url,
        )

    def _remove_staging(self, run: _Run) -> None:
        if run.staging is None:
            return
        shutil.rmtree(run.staging, ignore_errors=True)
        self._log.debug("staging_removed", staging=str(run.staging))
