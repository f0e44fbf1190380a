# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from constructs import Construct
from aws_cdk import Stack

from .alarm_pipeline import AlarmPipeline
from .audit_task import CloudMapperAuditTask
from .config import AuditorConfig
from .public_vpc import PublicOnlyVpc

from lib.suppressions import add_suppressions


class CloudMapperAuditorStack(Stack):

    def __init__(self, scope: Construct, construct_id: str,
                 config: AuditorConfig, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        # VPC without a NAT gateway, the task only ever runs in public subnets
        self.network = PublicOnlyVpc(
            self, "CloudMapperVpc",
            max_azs=2
        )

        self.audit_task = CloudMapperAuditTask(
            self, "AuditTask",
            vpc=self.network.vpc,
            config=config
        )

        self.alarm_pipeline = AlarmPipeline(
            self, "AlarmPipeline",
            alarm_sns_arn=config.alarm_sns_arn
        )

        # Adding Suppressions for CDK NAG
        add_suppressions(self)
