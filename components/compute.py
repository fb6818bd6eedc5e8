"""
Server-side rendering backend: Lambda function behind an HTTP API.

This component packages the prebuilt server bundle as a Lambda function and
exposes it through an API Gateway v2 HTTP API with a single ``$default``
route (HTTP APIs are cheaper and simpler than REST APIs for a pure proxy).
CloudFront uses ``origin_domain`` as its dynamic origin.
"""

import pulumi
import pulumi_aws as aws

from components._helpers import api_origin_domain, lambda_assume_role_policy

ID: str = "nodm:compute:SsrFunction"

BASIC_EXECUTION_POLICY_ARN = (
    "arn:aws:iam::aws:policy/service-role/AWSLambdaBasicExecutionRole"
)


class SsrFunction(pulumi.ComponentResource):
    """
    IAM role, Lambda function and HTTP API proxying every request to it.

    Resources: Role, RolePolicyAttachment, Function, Api, Integration,
    Route, Stage, Permission.
    """

    def __init__(
        self,
        name: str,
        project_name: str,
        bundle_dir: str,
        tags: dict[str, str],
        runtime: str = "nodejs22.x",
        timeout: int = 30,
        memory_size: int = 512,
        opts: pulumi.ResourceOptions | None = None,
    ):
        """
        Create the function and its API gateway.

        Args:
            name: Pulumi resource name prefix.
            project_name: Prefix for the physical role, function and API names.
            bundle_dir: Directory holding the built server (``index.handler``).
            tags: Tags for the role, function, API and stage.
            runtime: Lambda runtime identifier.
            timeout: Function timeout in seconds.
            memory_size: Function memory in MB.

        Outputs (set on self, registered for the component):
            function_name: Physical Lambda function name.
            function_arn: Lambda function ARN.
            api_endpoint: HTTPS endpoint of the HTTP API.
            origin_domain: Host name of api_endpoint, for CloudFront.
        """
        super().__init__(ID, name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        role = aws.iam.Role(
            resource_name=f"{name}-role",
            name=f"{project_name}-lambda-role",
            assume_role_policy=lambda_assume_role_policy(),
            tags=tags,
            opts=child_opts,
        )
        aws.iam.RolePolicyAttachment(
            resource_name=f"{name}-basic-execution",
            role=role.name,
            policy_arn=BASIC_EXECUTION_POLICY_ARN,
            opts=child_opts,
        )

        self.function = aws.lambda_.Function(
            resource_name=f"{name}-function",
            name=f"{project_name}-app",
            runtime=runtime,
            handler="index.handler",
            role=role.arn,
            code=pulumi.AssetArchive({".": pulumi.FileArchive(bundle_dir)}),
            timeout=timeout,
            memory_size=memory_size,
            environment=aws.lambda_.FunctionEnvironmentArgs(
                variables={"NODE_ENV": "production"},
            ),
            tags=tags,
            opts=child_opts,
        )

        api = aws.apigatewayv2.Api(
            resource_name=f"{name}-api",
            name=f"{project_name}-api",
            protocol_type="HTTP",
            tags=tags,
            opts=child_opts,
        )
        integration = aws.apigatewayv2.Integration(
            resource_name=f"{name}-integration",
            api_id=api.id,
            integration_type="AWS_PROXY",
            integration_uri=self.function.arn,
            integration_method="POST",
            payload_format_version="2.0",
            opts=child_opts,
        )
        route = aws.apigatewayv2.Route(
            resource_name=f"{name}-default-route",
            api_id=api.id,
            route_key="$default",
            target=pulumi.Output.concat("integrations/", integration.id),
            opts=child_opts,
        )

        # Auto-deploy only picks up routes that exist when the stage is created.
        stage_opts = pulumi.ResourceOptions(
            parent=self,
            depends_on=[route, integration],
        )
        aws.apigatewayv2.Stage(
            resource_name=f"{name}-stage",
            api_id=api.id,
            name="$default",
            auto_deploy=True,
            tags=tags,
            opts=stage_opts,
        )

        aws.lambda_.Permission(
            resource_name=f"{name}-api-invoke",
            action="lambda:InvokeFunction",
            function=self.function.name,
            principal="apigateway.amazonaws.com",
            source_arn=pulumi.Output.concat(api.execution_arn, "/*/*"),
            opts=child_opts,
        )

        self.function_name: pulumi.Output[str] = self.function.name
        self.function_arn: pulumi.Output[str] = self.function.arn
        self.api_endpoint: pulumi.Output[str] = api.api_endpoint
        self.origin_domain: pulumi.Output[str] = api.api_endpoint.apply(
            api_origin_domain
        )
        self.register_outputs(
            {
                "function_name": self.function_name,
                "function_arn": self.function_arn,
                "api_endpoint": self.api_endpoint,
                "origin_domain": self.origin_domain,
            }
        )
