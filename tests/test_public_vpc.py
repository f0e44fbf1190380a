"""
Tests for the NAT-free VPC and its private default route suppression.

The VPC is synthesized with aws_cdk.assertions so the checks run against the
CloudFormation template that would actually be deployed.
"""

import pytest
from aws_cdk import App, Environment, Stack
from aws_cdk import aws_ec2 as ec2
from aws_cdk.assertions import Template

from lib.public_vpc import (
    DEFAULT_ROUTE_ID,
    EXCLUDE_CONDITION_ID,
    PublicOnlyVpc,
    RouteSuppressionError,
    exclude_condition,
    is_default_route,
    suppress_default_routes,
)


def build_network(max_azs=2, env=None):
    stack = Stack(App(), "NetworkTestStack", env=env)
    network = PublicOnlyVpc(stack, "Network", max_azs=max_azs)
    return stack, network


def routes_by_subnet_kind(template, kind):
    return {
        logical_id: resource
        for logical_id, resource in template.find_resources("AWS::EC2::Route").items()
        if f"{kind}Subnet" in logical_id
    }


def default_routes_of(subnet):
    return [child for child in subnet.node.children if is_default_route(child)]


class TestSubnetLayout:
    @pytest.mark.parametrize("max_azs", [1, 2])
    def test_one_public_and_one_private_subnet_per_az(self, max_azs):
        _, network = build_network(max_azs=max_azs)

        assert len(network.vpc.public_subnets) == max_azs
        assert len(network.vpc.private_subnets) == max_azs

    def test_three_azs_in_an_environment_bound_stack(self):
        env = Environment(account="123456789012", region="us-east-1")
        stack, network = build_network(max_azs=3, env=env)

        assert len(network.vpc.public_subnets) == 3
        assert len(network.vpc.private_subnets) == 3
        Template.from_stack(stack).resource_count_is("AWS::EC2::Subnet", 6)

    def test_route_tables_and_associations_are_kept(self):
        stack, _ = build_network()
        template = Template.from_stack(stack)

        template.resource_count_is("AWS::EC2::RouteTable", 4)
        template.resource_count_is("AWS::EC2::SubnetRouteTableAssociation", 4)
        for resource in template.find_resources("AWS::EC2::RouteTable").values():
            assert "Condition" not in resource
        for resource in template.find_resources("AWS::EC2::Subnet").values():
            assert "Condition" not in resource


class TestPrivateRouteSuppression:
    def test_each_private_subnet_has_exactly_one_default_route(self):
        _, network = build_network()

        for subnet in network.vpc.private_subnets:
            assert len(default_routes_of(subnet)) == 1

    def test_private_default_routes_use_the_exclude_condition(self):
        stack, network = build_network()
        template = Template.from_stack(stack)
        condition_id = stack.resolve(network.exclude_condition.logical_id)

        private_routes = routes_by_subnet_kind(template, "Private")
        assert len(private_routes) == 2
        for route in private_routes.values():
            assert route["Condition"] == condition_id
            assert route["Properties"]["DestinationCidrBlock"] == "0.0.0.0/0"

    def test_public_internet_routes_are_unconditional(self):
        stack, _ = build_network()
        template = Template.from_stack(stack)

        public_routes = routes_by_subnet_kind(template, "Public")
        assert len(public_routes) == 2
        for route in public_routes.values():
            assert "Condition" not in route
            assert "GatewayId" in route["Properties"]

    def test_no_nat_gateway_is_provisioned(self):
        stack, _ = build_network()
        template = Template.from_stack(stack)

        template.resource_count_is("AWS::EC2::NatGateway", 0)
        template.resource_count_is("AWS::EC2::EIP", 0)

    def test_suppressed_routes_are_reported(self):
        _, network = build_network(max_azs=2)

        assert len(network.suppressed_routes) == 2


class TestExcludeCondition:
    def test_condition_compares_two_literals(self):
        stack, network = build_network()

        expression = stack.resolve(network.exclude_condition.expression)
        assert expression == {"Fn::Equals": [True, False]}

    def test_condition_is_rendered_once(self):
        stack, _ = build_network()
        conditions = Template.from_stack(stack).to_json()["Conditions"]

        always_false = [name for name, expression in conditions.items()
                        if expression == {"Fn::Equals": [True, False]}]
        assert always_false == [EXCLUDE_CONDITION_ID]

    def test_condition_is_shared_across_the_stack(self):
        stack, network = build_network()

        again = exclude_condition(network.vpc)

        assert again.node.path == network.exclude_condition.node.path
        assert stack.node.try_find_child(EXCLUDE_CONDITION_ID) is not None


class TestSuppressDefaultRoutes:
    def test_reapplying_is_idempotent(self):
        stack, network = build_network()
        first = [route.node.path for route in network.suppressed_routes]

        second = suppress_default_routes(
            network.vpc.private_subnets, network.exclude_condition)

        assert [route.node.path for route in second] == first
        assert len(network.vpc.private_subnets) == 2

        template = Template.from_stack(stack)
        conditional = [route for route in template.find_resources("AWS::EC2::Route").values()
                       if "Condition" in route]
        assert len(conditional) == 2
        template.resource_count_is("AWS::EC2::Subnet", 4)

    def test_subnet_without_a_route_fails_fast(self, stack):
        vpc = ec2.Vpc(
            stack, "IsolatedVpc",
            max_azs=1,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Isolated",
                    subnet_type=ec2.SubnetType.PRIVATE_ISOLATED
                )
            ]
        )

        with pytest.raises(RouteSuppressionError, match="IsolatedSubnet1"):
            suppress_default_routes(vpc.isolated_subnets, exclude_condition(stack))

    def test_empty_subnet_list_fails_fast(self, stack):
        with pytest.raises(RouteSuppressionError, match="No private subnets"):
            suppress_default_routes([], exclude_condition(stack))

    def test_vpc_without_private_subnets_fails_fast(self, stack):
        vpc = ec2.Vpc(
            stack, "PublicVpc",
            max_azs=2,
            nat_gateways=0,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC
                )
            ]
        )

        assert vpc.private_subnets == []
        with pytest.raises(RouteSuppressionError):
            suppress_default_routes(vpc.private_subnets, exclude_condition(stack))

    def test_private_subnets_route_out_nowhere_but_exist(self):
        _, network = build_network(max_azs=2)

        assert network.vpc.isolated_subnets == []
        assert len(network.vpc.private_subnets) == 2
        for subnet in network.vpc.private_subnets:
            child_ids = {child.node.id for child in subnet.node.children}
            assert {"RouteTable", "RouteTableAssociation", DEFAULT_ROUTE_ID} <= child_ids

    def test_only_route_entries_are_classified_as_default_routes(self):
        _, network = build_network(max_azs=1)
        subnet = network.vpc.private_subnets[0]

        kinds = sorted(child.node.id for child in subnet.node.children
                       if is_default_route(child))

        assert kinds == ["DefaultRoute"]
        assert not is_default_route(subnet.node.find_child("RouteTable"))
        assert not is_default_route(subnet.node.find_child("RouteTableAssociation"))
