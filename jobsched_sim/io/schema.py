"""JSON schema for scenario structure validation."""

from __future__ import annotations

CONFIG_SCHEMA: dict = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "title": "Job Scheduling Scenario",
    "type": "object",
    "required": ["version", "processors", "scheduler"],
    "properties": {
        "version": {"type": "string"},
        "processors": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/$defs/Processor"},
        },
        "jobs": {
            "type": "array",
            "items": {"$ref": "#/$defs/Job"},
            "default": [],
        },
        "generator": {"$ref": "#/$defs/Generator"},
        "scheduler": {
            "type": "object",
            "required": ["name"],
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "mode": {
                    "type": "string",
                    "enum": ["base", "dependency", "resource", "integrated"],
                    "default": "base",
                },
                "params": {
                    "type": "object",
                    "default": {},
                    "properties": {
                        "quantum": {"type": "integer", "minimum": 1},
                        "sjf_weight": {"type": "number"},
                        "min_min_weight": {"type": "number"},
                        "io_bound_threshold": {"type": "number", "minimum": 0, "maximum": 1},
                    },
                },
            },
            "additionalProperties": False,
        },
        "predictor": {
            "type": "object",
            "properties": {
                "name": {"type": "string", "minLength": 1},
                "history_path": {"type": ["string", "null"]},
                "params": {
                    "type": "object",
                    "default": {},
                    "properties": {
                        "learning_rate": {"type": "number", "exclusiveMinimum": 0},
                        "epochs": {"type": "integer", "minimum": 1},
                        "seed": {"type": "integer"},
                        "min_records": {"type": "integer", "minimum": 1},
                        "retrain_interval": {"type": "integer", "minimum": 1},
                    },
                },
            },
            "additionalProperties": False,
        },
        "sim": {
            "type": "object",
            "properties": {
                "max_ticks": {"type": "integer", "minimum": 1},
                "seed": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
    "$defs": {
        "Capacity": {
            "type": "object",
            "required": ["memory", "network", "cpu"],
            "properties": {
                "memory": {"type": "integer", "exclusiveMinimum": 0},
                "network": {"type": "integer", "exclusiveMinimum": 0},
                "cpu": {"type": "integer", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "Processor": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "integer", "minimum": 0},
                "speed_factor": {"type": "number", "exclusiveMinimum": 0},
                "capacity": {"$ref": "#/$defs/Capacity"},
            },
            "additionalProperties": False,
        },
        "Resources": {
            "type": "object",
            "properties": {
                "memory": {"type": "integer", "minimum": 0},
                "network": {"type": "integer", "minimum": 0},
                "cpu": {"type": "integer", "minimum": 0},
            },
            "additionalProperties": False,
        },
        "Dependency": {
            "type": "object",
            "required": ["job"],
            "properties": {
                "job": {"type": "integer", "minimum": 0},
                "type": {"type": "string", "enum": ["requires", "prefers", "conflicts_with"]},
            },
            "additionalProperties": False,
        },
        "Job": {
            "type": "object",
            "required": ["id", "execution_time"],
            "properties": {
                "id": {"type": "integer", "minimum": 0},
                "arrival": {"type": "integer", "minimum": 0},
                "execution_time": {"type": "integer", "minimum": 1},
                "estimated_execution_time": {"type": ["integer", "null"], "minimum": 1},
                "priority": {"type": "integer", "minimum": 1, "maximum": 10},
                "io_bound": {"type": "boolean"},
                "resources": {"$ref": "#/$defs/Resources"},
                "dependencies": {
                    "type": "array",
                    "items": {"$ref": "#/$defs/Dependency"},
                    "default": [],
                },
            },
            "additionalProperties": False,
        },
        "Generator": {
            "type": "object",
            "properties": {
                "pattern": {
                    "type": "string",
                    "enum": ["independent", "random", "layered", "linear", "tree", "diamond", "pipeline"],
                },
                "count": {"type": "integer", "minimum": 1},
                "min_execution_time": {"type": "integer", "minimum": 1},
                "max_execution_time": {"type": "integer", "minimum": 1},
                "max_dependencies": {"type": "integer", "minimum": 1},
                "dag_width": {"type": "integer", "minimum": 1},
                "with_resources": {"type": "boolean"},
                "seed": {"type": "integer"},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}
