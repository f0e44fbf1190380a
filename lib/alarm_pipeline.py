# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from constructs import Construct

from aws_cdk import (
    Duration,
    aws_cloudwatch as cloudwatch,
    aws_cloudwatch_actions as cloudwatch_actions,
    aws_iam as iam,
    aws_lambda as _lambda,
    aws_logs as logs,
    aws_sns as sns,
    aws_sns_subscriptions as sns_subscriptions,
)

METRIC_NAMESPACE = "cloudmapper"
ERROR_METRIC_NAME = "errors"


class AlarmPipeline(Construct):
    def __init__(self, scope: Construct, id: str, alarm_sns_arn: str, **kwargs):

        super().__init__(scope, id, **kwargs)

        # The audit task publishes cloudmapper/errors, any datapoint above zero alarms
        self._error_alarm = cloudwatch.Alarm(
            self,
            "ErrorAlarm",
            alarm_name="cloudmapper_errors",
            alarm_description="Detect errors",
            metric=cloudwatch.Metric(
                namespace=METRIC_NAMESPACE,
                metric_name=ERROR_METRIC_NAME,
                statistic="Sum",
            ),
            threshold=0,
            comparison_operator=cloudwatch.ComparisonOperator.GREATER_THAN_THRESHOLD,
            evaluation_periods=1,
            datapoints_to_alarm=1,
            treat_missing_data=cloudwatch.TreatMissingData.NOT_BREACHING,
        )

        self._alarm_topic = sns.Topic(
            self, "AlarmTopic",
            display_name="cloudmapper_alarm"
        )

        self._error_alarm.add_alarm_action(
            cloudwatch_actions.SnsAction(self._alarm_topic))

        # Lambda function forwarding alarms from the local topic to the external one

        self._alarm_forwarder = _lambda.Function(
            self,
            "AlarmForwarder",
            runtime=_lambda.Runtime.PYTHON_3_12,
            handler="main.handler",
            code=_lambda.Code.from_asset("source/alarm_forwarder"),
            description="Forwards alarms from the local SNS to another",
            timeout=Duration.seconds(30),
            memory_size=128,
            log_group=logs.LogGroup(
                self, "AlarmForwarderLogs",
                retention=logs.RetentionDays.TWO_WEEKS
            ),
            environment={
                "ALARM_SNS": alarm_sns_arn,
            },
        )

        self._alarm_forwarder.add_to_role_policy(iam.PolicyStatement(
            actions=["sns:Publish"],
            resources=[alarm_sns_arn]
        ))

        self._alarm_topic.add_subscription(
            sns_subscriptions.LambdaSubscription(self._alarm_forwarder))

    @property
    def alarm(self) -> cloudwatch.Alarm:
        return self._error_alarm

    @property
    def topic(self) -> sns.Topic:
        return self._alarm_topic

    @property
    def forwarder(self) -> _lambda.Function:
        return self._alarm_forwarder
