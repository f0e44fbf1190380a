# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

from typing import List, Sequence

from constructs import Construct, IConstruct
from aws_cdk import (
    Annotations,
    CfnCondition,
    CfnResource,
    Fn,
    Stack,
    aws_ec2 as ec2,
)

EXCLUDE_CONDITION_ID = "ExcludeDefaultRouteSubnet"
DEFAULT_ROUTE_ID = "DefaultRoute"


class RouteSuppressionError(RuntimeError):
    """A private subnet had no default route to suppress."""


def is_default_route(child: IConstruct) -> bool:
    # Route entries only; the route table and its association must survive
    return (isinstance(child, CfnResource)
            and child.cfn_resource_type == ec2.CfnRoute.CFN_RESOURCE_TYPE_NAME)


def exclude_condition(scope: Construct) -> CfnCondition:
    """
    Return the stack's always-false creation condition, creating it on first use.

    The expression compares two literals, so no parameter can ever make it
    true. Every suppressed route references this one instance.
    """
    stack = Stack.of(scope)
    existing = stack.node.try_find_child(EXCLUDE_CONDITION_ID)
    if existing is not None:
        return existing

    return CfnCondition(
        stack, EXCLUDE_CONDITION_ID,
        expression=Fn.condition_equals(True, False)
    )


def suppress_default_routes(subnets: Sequence[ec2.ISubnet],
                            condition: CfnCondition) -> List[CfnResource]:
    """
    Attach ``condition`` to the default route of every subnet in ``subnets``.

    Raises RouteSuppressionError if any subnet has no route child, or if
    nothing at all was suppressed. A silent miss would bring the NAT charge
    back without any visible failure.
    """
    suppressed = []
    for subnet in subnets:
        routes = [child for child in subnet.node.children
                  if is_default_route(child)]
        if not routes:
            raise RouteSuppressionError(
                f"No default route found under subnet {subnet.node.path}; "
                "the private subnet layout of aws-cdk-lib has changed")
        for route in routes:
            route.cfn_options.condition = condition
        suppressed.extend(routes)
    if not suppressed:
        raise RouteSuppressionError("No private subnets were given, no default route was suppressed")
    return suppressed


class PublicOnlyVpc(Construct):
    """
    VPC whose private subnets exist but never route anywhere.

    ec2.Vpc always pairs a private subnet with each public one. Private
    subnets normally route out through a NAT gateway, which is billed by the
    hour. Here the VPC is built without NAT gateways and the private default
    routes are gated behind a condition that is always false, so the subnets
    and route tables are created but no egress path or NAT device is.

    Based on the workaround in https://github.com/aws/aws-cdk/issues/1305#issuecomment-525474540
    """

    def __init__(self, scope: Construct, id: str,
                 max_azs: int = 2,
                 **kwargs):

        super().__init__(scope, id, **kwargs)

        self._vpc = ec2.Vpc(
            self, "Vpc",
            max_azs=max_azs,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC
                ),
                # Without NAT gateways the default layout pairs PUBLIC with
                # PRIVATE_ISOLATED, so the private tier is requested explicitly
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS
                )
            ]
        )

        # Current aws-cdk-lib leaves PRIVATE_WITH_EGRESS route tables empty
        # when there are no NAT gateways, so declare the paired default route
        # here to keep one route per private subnet for the suppressor.
        for subnet in self._vpc.private_subnets:
            if not any(is_default_route(child) for child in subnet.node.children):
                subnet.add_route(
                    DEFAULT_ROUTE_ID,
                    router_id=self._vpc.internet_gateway_id,
                    router_type=ec2.RouterType.GATEWAY,
                    destination_cidr_block="0.0.0.0/0"
                )

        self._exclude_condition = exclude_condition(self)

        self._suppressed_routes = suppress_default_routes(
            self._vpc.private_subnets, self._exclude_condition)

        # One private subnet and one suppressed route per AZ actually used
        az_count = len(self._vpc.availability_zones)
        if not (len(self._suppressed_routes)
                == len(self._vpc.private_subnets) == az_count):
            raise RouteSuppressionError(
                f"Expected {az_count} suppressed default route(s), one per AZ, "
                f"found {len(self._suppressed_routes)} across "
                f"{len(self._vpc.private_subnets)} private subnet(s)")

        Annotations.of(self).add_info(
            f"Suppressed {len(self._suppressed_routes)} private default route(s) "
            f"across {len(self._vpc.private_subnets)} private subnet(s)")

    @property
    def vpc(self) -> ec2.Vpc:
        return self._vpc

    @property
    def exclude_condition(self) -> CfnCondition:
        return self._exclude_condition

    @property
    def suppressed_routes(self) -> List[CfnResource]:
        return list(self._suppressed_routes)
