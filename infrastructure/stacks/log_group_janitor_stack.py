"""Log group janitor stack: CloudTrail rule -> intake queue -> schedules -> deletion queue."""

from __future__ import annotations

from typing import Dict, List, Optional

from aws_cdk import (
    Aws,
    Duration,
    RemovalPolicy,
    Stack,
    aws_cloudwatch as cw,
    aws_cloudwatch_actions as cw_actions,
    aws_events as events,
    aws_events_targets as targets,
    aws_iam as iam,
    aws_lambda as lambda_,
    aws_logs as logs,
    aws_sqs as sqs,
    CfnOutput,
)
from aws_cdk import aws_lambda_event_sources as lambda_event_sources
from aws_cdk.aws_lambda_python_alpha import BundlingOptions, PythonFunction, PythonLayerVersion
from cdk_nag import NagPackSuppression, NagSuppressions
from constructs import Construct

from infrastructure.config.types import EnvironmentConfig

# cdk-nag renders intrinsic references as <AWS::...> in finding identifiers
_BASIC_EXECUTION_POLICY = "Policy::arn:<AWS::Partition>:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
_NAG_LOG_GROUP_ARN = "arn:<AWS::Partition>:logs:*:<AWS::AccountId>:log-group:*"
_NAG_SCHEDULE_ARN = "arn:<AWS::Partition>:scheduler:<AWS::Region>:<AWS::AccountId>:schedule/*"


class LogGroupJanitorStack(Stack):
    """Detects matching log group creation and deletes the group after its retention."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: str,
        config: EnvironmentConfig,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        self.env_name = environment
        self.config = config
        self.app_name: str = str(config["app_name"])

        self.common_layer = self._create_common_layer()

        self.intake_dlq, self.intake_queue = self._create_intake_queues()
        self.deletion_dlq, self.deletion_queue = self._create_deletion_queues()
        self.scheduler_role = self._create_scheduler_role()

        self.event_handler_function = self._create_event_handler_function()
        self.deletion_function = self._create_deletion_function()
        self.notifier_function = self._create_notifier_function()

        self.creation_rule = self._create_log_group_creation_rule()
        self._create_alarms()
        self._create_outputs()
        self._add_nag_suppressions()

    # ----- queues and roles -----

    def _queue_retention(self) -> Duration:
        return Duration.days(int(self.config.get("queue_retention_days", 14)))

    def _visibility_timeout(self) -> Duration:
        # AWS recommends six times the consumer timeout for SQS event sources
        return Duration.seconds(int(self.config.get("lambda_timeout", 30)) * 6)

    def _create_intake_queues(self) -> tuple[sqs.Queue, sqs.Queue]:
        """Create the queue buffering CreateLogGroup events and its DLQ."""
        dlq = sqs.Queue(
            self,
            "IntakeDlq",
            queue_name=f"{self.app_name}-intake-dlq",
            retention_period=self._queue_retention(),
            encryption=sqs.QueueEncryption.SQS_MANAGED,
            enforce_ssl=True,
        )
        queue = sqs.Queue(
            self,
            "IntakeQueue",
            queue_name=f"{self.app_name}-intake-queue",
            retention_period=self._queue_retention(),
            visibility_timeout=self._visibility_timeout(),
            dead_letter_queue=sqs.DeadLetterQueue(
                queue=dlq,
                max_receive_count=int(self.config.get("max_receive_count", 3)),
            ),
            encryption=sqs.QueueEncryption.SQS_MANAGED,
            enforce_ssl=True,
        )
        return dlq, queue

    def _create_deletion_queues(self) -> tuple[sqs.Queue, sqs.Queue]:
        """Create the queue deletion schedules deliver to, and its DLQ."""
        dlq = sqs.Queue(
            self,
            "DeletionDlq",
            queue_name=f"{self.app_name}-deletion-dlq",
            retention_period=self._queue_retention(),
            encryption=sqs.QueueEncryption.SQS_MANAGED,
            enforce_ssl=True,
        )
        self._deny_cross_account_send(dlq)

        queue = sqs.Queue(
            self,
            "DeletionQueue",
            queue_name=f"{self.app_name}-deletion-queue",
            retention_period=self._queue_retention(),
            visibility_timeout=self._visibility_timeout(),
            dead_letter_queue=sqs.DeadLetterQueue(
                queue=dlq,
                max_receive_count=int(self.config.get("max_receive_count", 3)),
            ),
            encryption=sqs.QueueEncryption.SQS_MANAGED,
            enforce_ssl=True,
        )
        self._deny_cross_account_send(queue)
        return dlq, queue

    def _deny_cross_account_send(self, queue: sqs.Queue) -> None:
        queue.add_to_resource_policy(
            iam.PolicyStatement(
                sid="DenyCrossAccount",
                effect=iam.Effect.DENY,
                principals=[iam.AnyPrincipal()],
                actions=["sqs:SendMessage"],
                resources=[queue.queue_arn],
                conditions={"StringNotEquals": {"aws:PrincipalAccount": self.account}},
            )
        )

    def _create_scheduler_role(self) -> iam.Role:
        """Role EventBridge Scheduler assumes to put messages on the deletion queue."""
        role = iam.Role(
            self,
            "PublishToQueueRole",
            role_name=f"{self.app_name}-publish-to-queue-role",
            assumed_by=iam.ServicePrincipal(
                "scheduler.amazonaws.com",
                conditions={"StringEquals": {"aws:SourceAccount": self.account}},
            ),
        )
        self.deletion_queue.grant_send_messages(role)
        return role

    # ----- functions -----

    def _create_common_layer(self) -> lambda_.ILayerVersion:
        """Create Common Layer for shared models and utilities.

        Uses standard Python layer layout: python/shared/... at the root of asset.
        """
        return PythonLayerVersion(
            self,
            "CommonLayer",
            entry="src/lambda/layers/common",
            layer_version_name=f"{self.app_name}-common-layer",
            description="Log group janitor shared models, clients and utilities",
            compatible_runtimes=[lambda_.Runtime.PYTHON_3_12],
            bundling=BundlingOptions(
                command=[
                    "bash",
                    "-c",
                    "set -euxo pipefail; "
                    "mkdir -p /asset-output/python; "
                    "cp -R /asset-input/python/. /asset-output/python/; "
                    "if [ -f requirements.txt ]; then pip install -q -r requirements.txt -t /asset-output/python; fi",
                ],
                asset_excludes=["tests", "__pycache__", "*.pyc"],
            ),
        )

    def _base_environment(self) -> Dict[str, str]:
        env = {
            "ENVIRONMENT": self.env_name,
            "LOG_LEVEL": str(self.config.get("log_level", "INFO")).upper(),
            "LOG_EVENT": str(bool(self.config.get("log_event", False))).lower(),
        }
        return env

    def _python_function(
        self,
        construct_id: str,
        *,
        name: str,
        entry: str,
        environment: Dict[str, str],
        timeout_seconds: Optional[int] = None,
    ):
        function_name = f"{self.app_name}-{name}"
        log_group = logs.LogGroup(
            self,
            f"{construct_id}LogGroup",
            log_group_name=f"/aws/lambda/{function_name}",
            retention=self._log_retention(),
            removal_policy=RemovalPolicy.DESTROY,
        )
        return PythonFunction(
            self,
            construct_id,
            function_name=function_name,
            runtime=lambda_.Runtime.PYTHON_3_12,
            entry=entry,
            index="handler.py",
            handler="main",
            memory_size=int(self.config.get("lambda_memory", 512)),
            timeout=Duration.seconds(timeout_seconds or int(self.config.get("lambda_timeout", 30))),
            log_group=log_group,
            layers=[self.common_layer],
            environment={**self._base_environment(), **environment},
        )

    # Built from pseudo parameters so the rendered ARN does not depend on the stack env
    @staticmethod
    def _log_group_arn() -> str:
        return f"arn:{Aws.PARTITION}:logs:*:{Aws.ACCOUNT_ID}:log-group:*"

    @staticmethod
    def _schedule_arn() -> str:
        return f"arn:{Aws.PARTITION}:scheduler:{Aws.REGION}:{Aws.ACCOUNT_ID}:schedule/*"

    def _create_event_handler_function(self) -> lambda_.IFunction:
        """Intake Lambda: resolves retention and registers the deletion schedule."""
        function = self._python_function(
            "EventHandlerFunction",
            name="event-handler",
            entry="src/lambda/functions/log_group_event_handler",
            environment={
                "DELETION_QUEUE_ARN": self.deletion_queue.queue_arn,
                "SCHEDULER_ROLE_ARN": self.scheduler_role.role_arn,
                "DELETION_DELAY_DAYS": str(int(self.config["deletion_delay_days"])),
                "SCHEDULE_WINDOW_MINUTES": str(int(self.config.get("schedule_window_minutes", 5))),
            },
        )
        function.add_to_role_policy(
            iam.PolicyStatement(actions=["logs:DescribeLogGroups"], resources=[self._log_group_arn()])
        )
        function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["scheduler:CreateSchedule"],
                resources=[self._schedule_arn()],
            )
        )
        function.add_to_role_policy(
            iam.PolicyStatement(actions=["iam:PassRole"], resources=[self.scheduler_role.role_arn])
        )

        max_concurrency = self.config.get("intake_max_concurrency")
        function.add_event_source(
            lambda_event_sources.SqsEventSource(
                self.intake_queue,
                batch_size=int(self.config.get("sqs_batch_size", 10)),
                report_batch_item_failures=True,
                max_concurrency=int(max_concurrency) if max_concurrency else None,
            )
        )
        return function

    def _create_deletion_function(self) -> lambda_.IFunction:
        """Deletion Lambda subscribed to the deletion queue."""
        function = self._python_function(
            "DeletionHandlerFunction",
            name="deletion-handler",
            entry="src/lambda/functions/deletion_handler",
            environment={},
        )
        function.add_to_role_policy(
            iam.PolicyStatement(actions=["logs:DeleteLogGroup"], resources=[self._log_group_arn()])
        )
        function.add_event_source(
            lambda_event_sources.SqsEventSource(
                self.deletion_queue,
                batch_size=int(self.config.get("sqs_batch_size", 10)),
                report_batch_item_failures=True,
            )
        )
        return function

    def _create_notifier_function(self) -> lambda_.IFunction:
        """Alarm action Lambda posting ALARM transitions to the Slack workflow."""
        param_name = str(self.config["webhook_parameter_name"])
        function = self._python_function(
            "AlarmNotifierFunction",
            name="alarm-notifier",
            entry="src/lambda/functions/alarm_notifier",
            environment={
                "APP_NAME": self.app_name,
                "SLACK_WEBHOOK_PARAM_NAME": param_name,
                "WEBHOOK_CACHE_SECONDS": str(int(self.config.get("webhook_cache_seconds", 300))),
            },
            timeout_seconds=self._notifier_timeout(),
        )
        function.add_to_role_policy(
            iam.PolicyStatement(
                actions=["ssm:GetParameter"],
                resources=[
                    Stack.of(self).format_arn(
                        service="ssm",
                        resource="parameter",
                        resource_name=param_name.lstrip("/"),
                    )
                ],
            )
        )
        return function

    # ----- detection -----

    def _creation_event_pattern(self) -> events.EventPattern:
        patterns: List[str] = list(self.config["log_group_patterns"])
        request_parameters: Dict[str, object] = {
            "logGroupName": [{"prefix": pattern} for pattern in patterns],
        }
        required_tags: Dict[str, str] = dict(self.config.get("required_tags") or {})
        if required_tags:
            request_parameters["tags"] = {key: [value] for key, value in required_tags.items()}

        return events.EventPattern(
            source=["aws.logs"],
            detail_type=["AWS API Call via CloudTrail"],
            detail={
                "eventSource": ["logs.amazonaws.com"],
                "eventName": ["CreateLogGroup"],
                "requestParameters": request_parameters,
            },
        )

    def _create_log_group_creation_rule(self) -> events.Rule:
        """Route matching CreateLogGroup calls into the intake queue."""
        rule = events.Rule(
            self,
            "LogGroupCreationRule",
            rule_name=f"{self.app_name}-Rule",
            event_pattern=self._creation_event_pattern(),
            enabled=True,
        )
        rule.add_target(targets.SqsQueue(self.intake_queue))
        return rule

    # ----- monitoring -----

    def _create_alarms(self) -> None:
        action = cw_actions.LambdaAction(self.notifier_function)

        deletion_dlq_alarm = cw.Alarm(
            self,
            "DeletionDlqAlarm",
            alarm_name=f"{self.app_name}-DLQ-Messages",
            alarm_description="Messages in DLQ indicate repeated deletion failures requiring investigation",
            metric=self.deletion_dlq.metric_approximate_number_of_messages_visible(period=Duration.minutes(1)),
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cw.TreatMissingData.NOT_BREACHING,
        )
        deletion_dlq_alarm.add_alarm_action(action)

        intake_dlq_alarm = cw.Alarm(
            self,
            "IntakeDlqAlarm",
            alarm_name=f"{self.app_name}-Intake-DLQ-Messages",
            alarm_description="Log group creation events could not be scheduled for deletion",
            metric=self.intake_dlq.metric_approximate_number_of_messages_visible(period=Duration.minutes(1)),
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cw.TreatMissingData.NOT_BREACHING,
        )
        intake_dlq_alarm.add_alarm_action(action)

        for construct_id, label, function in (
            ("EventHandlerErrorAlarm", "EventHandler", self.event_handler_function),
            ("DeletionHandlerErrorAlarm", "DeletionHandler", self.deletion_function),
        ):
            alarm = cw.Alarm(
                self,
                construct_id,
                alarm_name=f"{self.app_name}-{label}-Errors",
                alarm_description=f"{label} Lambda is experiencing errors",
                metric=function.metric_errors(period=Duration.minutes(5)),
                threshold=1,
                evaluation_periods=1,
                comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
                treat_missing_data=cw.TreatMissingData.NOT_BREACHING,
            )
            alarm.add_alarm_action(action)

        # The notifier cannot report on itself; this alarm is for dashboards and manual review.
        cw.Alarm(
            self,
            "AlarmNotifierErrorAlarm",
            alarm_name=f"{self.app_name}-AlarmNotifier-Errors",
            alarm_description="Alarm notifier failed to deliver to the webhook",
            metric=self.notifier_function.metric_errors(period=Duration.minutes(5)),
            threshold=1,
            evaluation_periods=1,
            comparison_operator=cw.ComparisonOperator.GREATER_THAN_OR_EQUAL_TO_THRESHOLD,
            treat_missing_data=cw.TreatMissingData.NOT_BREACHING,
        )

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs."""
        CfnOutput(
            self,
            "IntakeQueueUrl",
            value=self.intake_queue.queue_url,
            description="Queue buffering CreateLogGroup events",
        )
        CfnOutput(
            self,
            "DeletionQueueUrl",
            value=self.deletion_queue.queue_url,
            description="Queue receiving fired deletion schedules",
        )
        CfnOutput(
            self,
            "DeletionDlqUrl",
            value=self.deletion_dlq.queue_url,
            description="DLQ for deletions that failed repeatedly",
        )
        CfnOutput(
            self,
            "AlarmNotifierFunctionArn",
            value=self.notifier_function.function_arn,
            description="Alarm notifier function ARN",
        )

    def _notifier_timeout(self) -> int:
        # Must outlast every webhook attempt plus the backoff between them
        return max(int(self.config.get("notifier_timeout", 60)), int(self.config.get("lambda_timeout", 30)))

    def _add_nag_suppressions(self) -> None:
        """Document the AwsSolutions findings the janitor accepts, per function role."""
        basic_execution = NagPackSuppression(
            id="AwsSolutions-IAM4",
            reason="Default AWS managed policy AWSLambdaBasicExecutionRole is acceptable for lambda execution role",
            applies_to=[_BASIC_EXECUTION_POLICY],
        )
        NagSuppressions.add_resource_suppressions(
            self.event_handler_function.role,
            [
                basic_execution,
                NagPackSuppression(
                    id="AwsSolutions-IAM5",
                    reason=(
                        "Log groups are created by test suites under unknown names and schedules get random "
                        "names, so lookup and schedule creation need wildcard resources"
                    ),
                    applies_to=[f"Resource::{_NAG_LOG_GROUP_ARN}", f"Resource::{_NAG_SCHEDULE_ARN}"],
                ),
            ],
            apply_to_children=True,
        )
        NagSuppressions.add_resource_suppressions(
            self.deletion_function.role,
            [
                basic_execution,
                NagPackSuppression(
                    id="AwsSolutions-IAM5",
                    reason="Deletion targets arbitrary log groups created by test suites",
                    applies_to=[f"Resource::{_NAG_LOG_GROUP_ARN}"],
                ),
            ],
            apply_to_children=True,
        )
        NagSuppressions.add_resource_suppressions(
            self.notifier_function.role,
            [basic_execution],
            apply_to_children=True,
        )
        for function in (self.event_handler_function, self.deletion_function, self.notifier_function):
            NagSuppressions.add_resource_suppressions(
                function,
                [
                    NagPackSuppression(
                        id="AwsSolutions-L1",
                        reason="Runtime is pinned to the Python version the common layer is built for",
                    )
                ],
            )

    def _log_retention(self) -> logs.RetentionDays:
        """Map integer days from config to CloudWatch Logs retention enum."""
        retention_map = {
            1: logs.RetentionDays.ONE_DAY,
            3: logs.RetentionDays.THREE_DAYS,
            5: logs.RetentionDays.FIVE_DAYS,
            7: logs.RetentionDays.ONE_WEEK,
            14: logs.RetentionDays.TWO_WEEKS,
            30: logs.RetentionDays.ONE_MONTH,
            90: logs.RetentionDays.THREE_MONTHS,
        }
        return retention_map.get(self.config.get("log_retention_days", 14), logs.RetentionDays.TWO_WEEKS)
