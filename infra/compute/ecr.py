"""ECR repository and lifecycle policy."""

import json

import pulumi
import pulumi_aws


def _lifecycle_policy(keep_images: int) -> str:
    return json.dumps(
        {
            "rules": [
                {
                    "rulePriority": 1,
                    "description": f"Keep last {keep_images} images",
                    "selection": {
                        "tagStatus": "any",
                        "countType": "imageCountMoreThan",
                        "countNumber": keep_images,
                    },
                    "action": {"type": "expire"},
                }
            ],
        }
    )


def create_ecr_repository(
    service_name: str,
    aws_provider: pulumi_aws.Provider,
    keep_images: int = 5,
) -> pulumi_aws.ecr.Repository:
    """Create ECR repository for the Flask image with a keep-last-N lifecycle policy."""
    ecr_repo = pulumi_aws.ecr.Repository(
        f"{service_name}_ecr",
        name=service_name,
        image_tag_mutability="MUTABLE",
        image_scanning_configuration=pulumi_aws.ecr.RepositoryImageScanningConfigurationArgs(
            scan_on_push=True,
        ),
        force_delete=True,
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    pulumi_aws.ecr.LifecyclePolicy(
        f"{service_name}_ecr_lifecycle",
        repository=ecr_repo.name,
        policy=_lifecycle_policy(keep_images),
        opts=pulumi.ResourceOptions(provider=aws_provider),
    )
    return ecr_repo
