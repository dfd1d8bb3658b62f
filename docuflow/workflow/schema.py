#docuflow/workflow/schema.py

# Shape accepted for an exported n8n workflow. Deliberately permissive:
# unknown fields pass through untouched, only what the pipeline relies on
# is constrained.
WORKFLOW_SCHEMA = {
    "type": "object",
    "required": ["nodes", "connections"],
    "properties": {
        "name": {"type": ["string", "null"]},
        "nodes": {
            "type": "array",
            "items": {
                "type": "object",
                "required": ["name", "type"],
                "properties": {
                    "id": {
                        "type": ["string", "number"]
                    },
                    "name": {
                        "type": "string",
                        "minLength": 1
                    },
                    "type": {
                        "type": "string",
                        "minLength": 1
                    },

                    # Redaction target; must be a mapping when present
                    "parameters": {
                        "type": ["object", "null"]
                    },

                    # label -> {id, name}; references only, never values
                    "credentials": {
                        "type": "object",
                        "additionalProperties": {
                            "type": "object",
                            "properties": {
                                "id": {"type": ["string", "number", "null"]},
                                "name": {"type": "string"}
                            },
                            "additionalProperties": True
                        }
                    },

                    "notes": {"type": ["string", "null"]},

                    "typeVersion": {
                        "type": ["integer", "number"]
                    },

                    # n8n exports positions as [x, y]
                    "position": {
                        "type": "array",
                        "items": {"type": "number"}
                    }
                },
                "additionalProperties": True
            }
        },

        # Keys are source node names; values are stream -> paths mappings
        "connections": {
            "type": "object",
            "additionalProperties": {"type": "object"}
        }
    },
    "additionalProperties": True
}


# Shape the text-generation service must return for one workflow.
DOCUMENTATION_SCHEMA = {
    "type": "object",
    "required": ["summary", "toolsUsed", "credentialsRequired", "complexityScore"],
    "properties": {
        "summary": {"type": "string"},
        "toolsUsed": {
            "type": "array",
            "items": {"type": "string"}
        },
        "credentialsRequired": {
            "type": "array",
            "items": {"type": "string"}
        },
        "complexityScore": {"type": "integer"},
        "usageNotes": {"type": ["string", "null"]},
        "suggestedFilename": {"type": ["string", "null"]}
    },
    "additionalProperties": True
}
