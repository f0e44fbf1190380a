import sys

import aws_cdk as cdk

from lib.cloudmapper_auditor_stack import CloudMapperAuditorStack
from lib.config import DEFAULT_CONFIG_PATH, ConfigurationError, load_config
from cdk_nag import AwsSolutionsChecks, NagReportFormat

app = cdk.App()

# Load the deployment settings, refusing to synthesize with the placeholder values
config_path = app.node.try_get_context("config_path") or DEFAULT_CONFIG_PATH
try:
    config = load_config(config_path)
except ConfigurationError as e:
    sys.exit(str(e))

# Create an instance of the CloudMapperAuditorStack, passing the app instance and stack name
CloudMapperAuditorStack(app, "CloudMapperAuditorStack", config=config)

# Adding CDK Nag Checks
# This line adds the AwsSolutionsChecks aspect to the app
cdk.Aspects.of(app).add(AwsSolutionsChecks(report_formats=[NagReportFormat.CSV]))

# Synthesize the CloudFormation template for the stack
app.synth()
