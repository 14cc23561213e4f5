"""Structured definition of the transfer telemetry query.

``TransferQuery`` holds the parts of the join (event selection, join key,
noise filter, ordering) as data; ``to_kql`` is the only place that knows the
Kusto query language. Swapping the backend means replacing ``to_kql``, not the
record derivation rules.
"""

from dataclasses import dataclass

INITIATED_ACTION = "TRANSFER_INITIATED"
COMPLETED_ACTION = "TRANSFER_COMPLETED"
FAILED_ACTION = "TRANSFER_FAILED"

# Projected column names, in the order the backend returns them
RESULT_COLUMNS = (
    "TransferId",
    "CaseId",
    "Username",
    "TransferDirection",
    "InitiatedTime",
    "CompletedTime",
    "DurationSeconds",
    "DurationFormatted",
    "TotalFiles",
    "TransferredFiles",
    "ErrorFiles",
    "TotalMegaBytesTransferred",
    "TransferSpeedMbps",
)


def _kql_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


@dataclass(frozen=True)
class TransferQuery:
    """Join of initiated events to terminal events on the transfer id."""

    table: str = "AppEvents"
    event_name: str = "ActivityLogTelemetry"
    action_property: str = "actionType"
    join_key: str = "transferId"
    initiated_action: str = INITIATED_ACTION
    terminal_actions: tuple[str, ...] = (COMPLETED_ACTION, FAILED_ACTION)
    min_total_bytes: float = 0
    newest_first: bool = True

    def to_kql(self) -> str:
        """Render the query as Kusto (KQL) text."""
        terminal = ", ".join(_kql_string(action) for action in self.terminal_actions)
        order = "desc" if self.newest_first else "asc"
        event_filter = (
            f"{self.table}\n"
            f"    | where Name == {_kql_string(self.event_name)}\n"
            f"    | extend actionType = tostring(Properties.{self.action_property})"
        )

        return f"""let initiated = {event_filter}
    | where actionType == {_kql_string(self.initiated_action)}
    | extend transferId = tostring(Properties.{self.join_key})
    | project
        initiatedTime = TimeGenerated,
        transferId,
        caseId = tostring(Properties.caseId),
        userName = tostring(Properties.userName),
        sourcePath = tostring(Properties.sourcePath),
        destinationPath = tostring(Properties.destinationPath),
        transferDirection = tostring(Properties.transferDirection);
let completed = {event_filter}
    | where actionType in ({terminal})
    | extend transferId = tostring(Properties.{self.join_key})
    | extend
        totalBytes = todouble(Measurements.totalBytes),
        totalFiles = todouble(Measurements.totalFiles),
        transferredFiles = todouble(Measurements.transferredFiles),
        errorFiles = todouble(Measurements.errorFiles)
    | where totalBytes > {self.min_total_bytes:g}
    | project
        completedTime = TimeGenerated,
        transferId,
        actionType,
        totalBytes,
        totalFiles,
        transferredFiles,
        errorFiles;
initiated
| join kind=inner completed on transferId
| extend durationSeconds = datetime_diff('second', completedTime, initiatedTime)
| project
    TransferId = transferId,
    CaseId = caseId,
    Username = userName,
    TransferDirection = transferDirection,
    InitiatedTime = initiatedTime,
    CompletedTime = completedTime,
    DurationSeconds = durationSeconds,
    DurationFormatted = strcat(durationSeconds / 60, 'm ', durationSeconds % 60, 's'),
    TotalFiles = totalFiles,
    TransferredFiles = transferredFiles,
    ErrorFiles = errorFiles,
    TotalMegaBytesTransferred = round(totalBytes / 1024.0 / 1024.0, 3),
    TransferSpeedMbps = iff(durationSeconds > 0, round((totalBytes / 1024.0 / 1024.0) / durationSeconds, 3), 0.0)
| order by InitiatedTime {order}
"""


TRANSFER_QUERY = TransferQuery()
