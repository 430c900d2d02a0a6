"""
Pytest configuration and shared fixtures for rust_codegen tests.

Provides a small service model, runtime configuration and writers used
across the test suite.
"""

import copy
import logging

import pytest

from rust_codegen.core.config import CodegenSettings, RuntimeConfig
from rust_codegen.core.model import Model
from rust_codegen.core.writer import RustWriter
from rust_codegen.customizations.region import RegionConfig, RegionConfigPlugin
from rust_codegen.registry import CustomizationRegistry


SAMPLE_MODEL = {
    "shapes": {
        "example.jobs#JobService": {
            "type": "service",
            "operations": [{"target": "example.jobs#GetJob"}],
        },
        "example.jobs#GetJob": {
            "type": "operation",
            "input": {"target": "example.jobs#GetJobInput"},
            "output": {"target": "example.jobs#GetJobOutput"},
        },
        "example.jobs#GetJobInput": {
            "type": "structure",
            "members": {
                "jobId": {
                    "target": "smithy.api#String",
                    "traits": {"smithy.api#required": {}},
                },
                "clientToken": {
                    "target": "smithy.api#String",
                    "traits": {"smithy.api#idempotencyToken": {}},
                },
            },
        },
        "example.jobs#GetJobOutput": {
            "type": "structure",
            "members": {"job": {"target": "example.jobs#Job"}},
        },
        "example.jobs#Job": {
            "type": "structure",
            "traits": {"smithy.api#documentation": "A scheduled job."},
            "members": {
                "createdAt": {
                    "target": "smithy.api#Timestamp",
                    "traits": {
                        "smithy.api#required": {},
                        "smithy.api#timestampFormat": "epoch-seconds",
                    },
                },
                "updatedAt": {"target": "smithy.api#Timestamp"},
                "tags": {"target": "example.jobs#TagList"},
                "payload": {"target": "smithy.api#Blob"},
            },
        },
        "example.jobs#TagList": {
            "type": "list",
            "member": {"target": "smithy.api#String"},
        },
        "example.jobs#JobNotFound": {
            "type": "structure",
            "traits": {"smithy.api#error": "client"},
            "members": {"message": {"target": "smithy.api#String"}},
        },
    }
}


@pytest.fixture
def model_document():
    """Fresh copy of the sample model document."""
    return copy.deepcopy(SAMPLE_MODEL)


@pytest.fixture
def model(model_document):
    """Sample model with one operation, its structures and an error."""
    return Model.from_document(model_document)


@pytest.fixture
def runtime_config():
    """Default runtime configuration."""
    return RuntimeConfig()


@pytest.fixture
def settings():
    """Default generation settings."""
    return CodegenSettings()


@pytest.fixture
def writer():
    """Writer for a module inside the generated crate."""
    return RustWriter("crate::test")


@pytest.fixture
def customization_registry():
    """Registry holding only the region customization."""
    registry = CustomizationRegistry()
    registry.register(
        "region",
        config_factory=RegionConfig,
        operation_factory=lambda runtime_config, shape: RegionConfigPlugin(shape),
    )
    return registry


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo logging changes made by setup_logging during a test."""
    logger = logging.getLogger("rust_codegen")
    handlers = logger.handlers[:]
    level = logger.level
    propagate = logger.propagate
    yield
    for handler in logger.handlers[:]:
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
