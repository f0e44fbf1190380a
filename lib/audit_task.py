# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from constructs import Construct
from aws_cdk import (
    aws_ecs as ecs,
    aws_ec2 as ec2,
    aws_iam as iam,
    aws_logs as logs,
    aws_events as events,
    aws_events_targets as targets,
)

from lib.config import AuditorConfig

CONTAINER_IMAGE_DIRECTORY = "resources"
# 2am EST (6am UTC) every night
SCHEDULE_EXPRESSION = "cron(0 6 * * ? *)"
MANUAL_RUN_SOURCE = "cloudmapper"


class CloudMapperAuditTask(Construct):

    def __init__(self, scope: Construct, id: str,
                 vpc: ec2.IVpc,
                 config: AuditorConfig,
                 **kwargs):

        super().__init__(scope, id, **kwargs)

        self._cluster = ecs.Cluster(self, "Cluster", vpc=vpc)

        self._task_definition = ecs.FargateTaskDefinition(
            self, "TaskDefinition",
            cpu=256,
            memory_limit_mib=512,
        )

        self._task_definition.add_container(
            "cloudmapper-container",
            image=ecs.ContainerImage.from_asset(CONTAINER_IMAGE_DIRECTORY),
            cpu=256,
            memory_limit_mib=512,
            environment={
                "S3_BUCKET": config.s3_bucket
            },
            logging=ecs.LogDriver.aws_logs(
                stream_prefix="cloudmapper",
                log_retention=logs.RetentionDays.TWO_WEEKS
            )
        )

        for statement in self.task_policy_statements(config):
            self._task_definition.add_to_task_role_policy(statement)

        # Both rules launch the task in the public subnets, the private ones have no route out
        self._scheduled_rule = events.Rule(
            self, "ScheduledRun",
            rule_name="cloudmapper_scheduler",
            schedule=events.Schedule.expression(SCHEDULE_EXPRESSION),
            description="Starts the CloudMapper auditing task every night",
            targets=[self._ecs_task_target()]
        )

        self._manual_rule = events.Rule(
            self, "ManualRun",
            rule_name="cloudmapper_manual_run",
            event_pattern=events.EventPattern(source=[MANUAL_RUN_SOURCE]),
            description="Allows CloudMapper auditing to be manually started",
            targets=[self._ecs_task_target()]
        )

    @staticmethod
    def task_policy_statements(config: AuditorConfig):
        return [
            # Assume the audit role in any account
            iam.PolicyStatement(
                actions=["sts:AssumeRole"],
                resources=[f"arn:aws:iam::*:role/{config.iam_role}"]
            ),
            # Read and write CloudMapper's files in the bucket
            iam.PolicyStatement(
                actions=["s3:ListBucket"],
                resources=[f"arn:aws:s3:::{config.s3_bucket}"]
            ),
            iam.PolicyStatement(
                actions=["s3:GetObject",
                         "s3:PutObject",
                         "s3:DeleteObject"],
                resources=[f"arn:aws:s3:::{config.s3_bucket}/*"]
            ),
            iam.PolicyStatement(
                actions=["logs:*"],
                resources=["*"]
            ),
            # PutMetricData has no resource-level permissions
            iam.PolicyStatement(
                actions=["cloudwatch:PutMetricData"],
                resources=["*"]
            ),
            iam.PolicyStatement(
                actions=["secretsmanager:GetSecretValue"],
                resources=["*"],
                conditions={
                    "ForAnyValue:StringLike": {
                        "secretsmanager:SecretId": "*cloudmapper-slack-webhook*"
                    }
                }
            ),
        ]

    def _ecs_task_target(self):
        return targets.EcsTask(
            cluster=self._cluster,
            task_definition=self._task_definition,
            subnet_selection=ec2.SubnetSelection(
                subnet_type=ec2.SubnetType.PUBLIC
            ),
            assign_public_ip=True
        )

    @property
    def cluster(self) -> ecs.Cluster:
        return self._cluster

    @property
    def task_definition(self) -> ecs.FargateTaskDefinition:
        return self._task_definition
