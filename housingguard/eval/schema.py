# housingguard/eval/schema.py
CASE_SCHEMA = {
    "type": "object",
    "required": ["text"],
    "properties": {
        "id": {"type": "string", "minLength": 1},
        "text": {"type": "string"},
        "expect_compliant": {"type": "boolean"},
        "expect_classification": {"enum": ["operations", "requires_broker", "requires_oversight"]},
        "expect_categories": {
            "type": "array",
            "items": {"enum": ["familial_status", "race_color", "national_origin",
                               "religion", "disability", "sex_gender"]},
        },
        "notes": {"type": "string"}
    },
    "additionalProperties": False
}
