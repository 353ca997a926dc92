"""
Palette entries offered for drag-and-drop or menu creation.
"""

from typing import List, Optional
from .schemas import NodeVariant, PaletteItem


def _items(variant: NodeVariant, rows) -> List[PaletteItem]:
    return [
        PaletteItem(id=item_id, label=label, type=variant, pluginType=plugin, description=desc, category=category)
        for item_id, label, plugin, desc, category in rows
    ]


# id, label, plugin type, description, category
TASK_PLUGINS = _items(NodeVariant.TASK, [
    ("log", "Log", "io.kestra.plugin.core.log.Log", "Log a message", "Core"),
    ("debug", "Debug", "io.kestra.plugin.core.debug.Return", "Return debug information", "Core"),
    ("pause", "Pause", "io.kestra.plugin.core.flow.Pause", "Pause flow execution", "Core"),
    ("sequential", "Sequential", "io.kestra.plugin.core.flow.Sequential", "Run tasks sequentially", "Core"),
    ("parallel", "Parallel", "io.kestra.plugin.core.flow.Parallel", "Run tasks in parallel", "Core"),
    ("http-request", "HTTP Request", "io.kestra.plugin.core.http.Request", "Make HTTP request", "HTTP"),
    ("http-download", "HTTP Download", "io.kestra.plugin.core.http.Download", "Download file via HTTP", "HTTP"),
    ("python-script", "Python Script", "io.kestra.plugin.scripts.python.Script", "Run Python script", "Scripts"),
    ("node-script", "Node.js Script", "io.kestra.plugin.scripts.node.Script", "Run Node.js script", "Scripts"),
    ("shell-script", "Shell Script", "io.kestra.plugin.scripts.shell.Script", "Run shell script", "Scripts"),
    ("powershell-script", "PowerShell", "io.kestra.plugin.scripts.powershell.Script", "Run PowerShell script", "Scripts"),
    ("send-email", "Send Email", "io.kestra.plugin.notifications.mail.MailSend", "Send email notification", "Notifications"),
    ("slack-incoming-webhook", "Slack Webhook", "io.kestra.plugin.notifications.slack.SlackIncomingWebhook",
     "Send Slack message", "Notifications"),
    ("teams-webhook", "Teams Webhook", "io.kestra.plugin.notifications.teams.TeamsIncomingWebhook",
     "Send Teams message", "Notifications"),
    ("aws-s3-upload", "S3 Upload", "io.kestra.plugin.aws.s3.Upload", "Upload to S3", "AWS"),
    ("aws-s3-download", "S3 Download", "io.kestra.plugin.aws.s3.Download", "Download from S3", "AWS"),
    ("aws-lambda-invoke", "Lambda Invoke", "io.kestra.plugin.aws.lambda.Invoke", "Invoke Lambda function", "AWS"),
    ("aws-cli", "AWS CLI", "io.kestra.plugin.aws.cli.AwsCLI", "Run AWS CLI commands", "AWS"),
    ("gcs-upload", "GCS Upload", "io.kestra.plugin.gcp.gcs.Upload", "Upload to Google Cloud Storage", "GCP"),
    ("gcs-download", "GCS Download", "io.kestra.plugin.gcp.gcs.Download", "Download from GCS", "GCP"),
    ("bigquery-query", "BigQuery Query", "io.kestra.plugin.gcp.bigquery.Query", "Run BigQuery query", "GCP"),
    ("azure-blob-upload", "Blob Upload", "io.kestra.plugin.azure.storage.blob.Upload", "Upload to Azure Blob", "Azure"),
    ("azure-blob-download", "Blob Download", "io.kestra.plugin.azure.storage.blob.Download",
     "Download from Azure Blob", "Azure"),
    ("postgres-query", "PostgreSQL Query", "io.kestra.plugin.jdbc.postgresql.Query", "Run PostgreSQL query", "Databases"),
    ("mysql-query", "MySQL Query", "io.kestra.plugin.jdbc.mysql.Query", "Run MySQL query", "Databases"),
    ("mongodb-find", "MongoDB Find", "io.kestra.plugin.mongodb.Find", "Query MongoDB", "Databases"),
    ("git-clone", "Git Clone", "io.kestra.plugin.git.Clone", "Clone Git repository", "Git"),
    ("git-push", "Git Push", "io.kestra.plugin.git.Push", "Push to Git repository", "Git"),
    ("docker-run", "Docker Run", "io.kestra.plugin.docker.Run", "Run Docker container", "Docker"),
    ("kubernetes-create", "K8s Create", "io.kestra.plugin.kubernetes.PodCreate", "Create Kubernetes pod", "Kubernetes"),
])

TRIGGER_PLUGINS = _items(NodeVariant.TRIGGER, [
    ("schedule", "Schedule", "io.kestra.plugin.core.trigger.Schedule", "Cron-based schedule", "Core"),
    ("webhook", "Webhook", "io.kestra.plugin.core.trigger.Webhook", "HTTP webhook trigger", "Core"),
    ("flow-trigger", "Flow", "io.kestra.plugin.core.trigger.Flow", "Trigger on flow completion", "Core"),
    ("polling", "Polling", "io.kestra.plugin.core.trigger.Polling", "Poll for changes", "Core"),
    ("aws-sqs", "AWS SQS", "io.kestra.plugin.aws.sqs.Consume", "Consume from SQS queue", "AWS"),
    ("aws-s3-list", "S3 List", "io.kestra.plugin.aws.s3.trigger.S3", "Trigger on S3 changes", "AWS"),
    ("gcp-pubsub", "GCP Pub/Sub", "io.kestra.plugin.gcp.pubsub.Consume", "Consume from Pub/Sub", "GCP"),
    ("kafka-consume", "Kafka", "io.kestra.plugin.kafka.Consume", "Consume from Kafka", "Messaging"),
    ("mqtt-subscribe", "MQTT", "io.kestra.plugin.mqtt.Subscribe", "Subscribe to MQTT topic", "Messaging"),
])

ERROR_HANDLER_TASKS = _items(NodeVariant.ERROR, [
    ("error-log", "Log", "io.kestra.plugin.core.log.Log", "Log error message", "Core"),
    ("error-debug", "Debug", "io.kestra.plugin.core.debug.Return", "Debug error", "Core"),
    ("error-email", "Send Email", "io.kestra.plugin.notifications.mail.MailSend", "Send error notification", "Notifications"),
    ("error-slack", "Slack", "io.kestra.plugin.notifications.slack.SlackIncomingWebhook", "Send Slack alert",
     "Notifications"),
    ("error-teams", "Teams", "io.kestra.plugin.notifications.teams.TeamsIncomingWebhook", "Send Teams alert",
     "Notifications"),
])

FINALLY_TASKS = _items(NodeVariant.FINALLY, [
    ("finally-log", "Log", "io.kestra.plugin.core.log.Log", "Log cleanup message", "Core"),
    ("finally-debug", "Debug", "io.kestra.plugin.core.debug.Return", "Debug cleanup", "Core"),
    ("finally-cleanup", "Cleanup", "io.kestra.plugin.scripts.shell.Script", "Run cleanup script", "Core"),
    ("finally-email", "Send Email", "io.kestra.plugin.notifications.mail.MailSend", "Send completion notification",
     "Notifications"),
])

FLOW_ELEMENTS = [
    PaletteItem(id="input", label="Input", type=NodeVariant.INPUT, description="Flow input parameter"),
    PaletteItem(id="output", label="Output", type=NodeVariant.OUTPUT, description="Flow output value"),
    PaletteItem(id="note", label="Note", type=NodeVariant.NOTE, description="Add sticky note"),
]

PALETTE_GROUPS = {
    "tasks": TASK_PLUGINS,
    "triggers": TRIGGER_PLUGINS,
    "errors": ERROR_HANDLER_TASKS,
    "finally": FINALLY_TASKS,
    "elements": FLOW_ELEMENTS,
}


def all_items() -> List[PaletteItem]:
    return [item for items in PALETTE_GROUPS.values() for item in items]


def get_palette_item(item_id: str) -> Optional[PaletteItem]:
    return next((item for item in all_items() if item.id == item_id), None)


def search_palette(query: str = "", group: Optional[str] = None) -> List[PaletteItem]:
    """Case-insensitive match on label, description, category and plugin type."""
    items = PALETTE_GROUPS.get(group, []) if group else all_items()
    needle = (query or "").strip().lower()
    if not needle:
        return list(items)
    return [
        item for item in items
        if needle in " ".join([item.label, item.description, item.category or "", item.pluginType]).lower()
    ]
