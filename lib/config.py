# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from dataclasses import dataclass

import yaml

DEFAULT_CONFIG_PATH = "s3_bucket_files/cdk_app.yaml"
PLACEHOLDER_BUCKET = "MYCOMPANY-cloudmapper"
REQUIRED_KEYS = ("s3_bucket", "iam_role", "alarm_sns_arn")


class ConfigurationError(ValueError):
    pass


@dataclass(frozen=True)
class AuditorConfig:
    """
    Settings for the auditor deployment.

    Attributes:
        s3_bucket (str): Bucket holding CloudMapper's config and reports.
        iam_role (str): Name of the role assumed in each audited account.
        alarm_sns_arn (str): External SNS topic that alarms are forwarded to.
    """
    s3_bucket: str
    iam_role: str
    alarm_sns_arn: str

    @classmethod
    def from_dict(cls, values):
        if not isinstance(values, dict):
            raise ConfigurationError(
                "Configuration must be a mapping of settings")

        missing = [key for key in REQUIRED_KEYS if not values.get(key)]
        if missing:
            raise ConfigurationError(
                f"Missing configuration values: {', '.join(missing)}")

        if values["s3_bucket"] == PLACEHOLDER_BUCKET:
            raise ConfigurationError(
                f"You must configure the CDK app by editing {DEFAULT_CONFIG_PATH}")

        return cls(**{key: str(values[key]) for key in REQUIRED_KEYS})


def read_yaml_file(file_path):
    try:
        with open(file_path, 'r') as file:
            return yaml.safe_load(file)
    except OSError as e:
        raise ConfigurationError(
            f"Unable to read configuration file {file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file {file_path}: {e}") from e


def load_config(file_path=DEFAULT_CONFIG_PATH) -> AuditorConfig:
    return AuditorConfig.from_dict(read_yaml_file(file_path))
