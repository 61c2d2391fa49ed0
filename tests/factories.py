"""
Snapshot record builders shared by the migration and API tests.
"""

WORKSPACE_ID = "11111111-1111-4111-8111-111111111111"
OTHER_WORKSPACE_ID = "22222222-2222-4222-8222-222222222222"
MISSING_WORKSPACE_ID = "99999999-9999-4999-8999-999999999999"
TIMESTAMP = "2025-01-15T10:00:00.000Z"


def make_workspace(workspace_id: str = WORKSPACE_ID, name: str = "Payments") -> dict:
    return {
        "id": workspace_id,
        "name": name,
        "pb_board_id": "board-1",
        "ado_project_id": "project-1",
        "pb_api_key": "pb-secret-key",
        "ado_api_key": "ado-secret-key",
        "sync_frequency": "daily",
        "last_sync_timestamp": None,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def make_story(story_id: str, workspace_id: str = WORKSPACE_ID) -> dict:
    return {
        "id": story_id,
        "workspace_id": workspace_id,
        "pb_id": "pb-feature-1",
        "pb_title": "Checkout redesign",
        "ado_id": None,
        "ado_title": None,
        "description": "Rework the checkout flow",
        "status": "in_progress",
        "story_points": 5,
        "completion_percentage": 40.5,
        "sync_status": "synced",
        "needs_split": False,
        "rice_score": {"reach": 100, "impact": 2, "confidence": 0.8, "effort": 3, "total": 53.3},
        "sprintable": True,
        "completeness_score": None,
        "notes": None,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def make_configuration(config_id: str, workspace_id: str = WORKSPACE_ID) -> dict:
    return {
        "id": config_id,
        "workspace_id": workspace_id,
        "openai_api_key": None,
        "slack_api_key": None,
        "slack_channel_id": None,
        "google_spaces_webhook_url": None,
        "field_propagation_enabled": True,
        "epic_to_feature_rules": {"area_path": "inherit"},
        "feature_to_story_rules": {},
        "risk_threshold_days": 14,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def make_template(template_id: str, workspace_id: str = WORKSPACE_ID) -> dict:
    return {
        "id": template_id,
        "workspace_id": workspace_id,
        "name": "Default story",
        "description": None,
        "level": "story",
        "template_data": {
            "title_template": "As a {role}",
            "acceptance_criteria_template": ["Given", "When", "Then"],
        },
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def make_field_mapping(mapping_id: str, workspace_id: str = WORKSPACE_ID) -> dict:
    return {
        "id": mapping_id,
        "workspace_id": workspace_id,
        "pb_field": "name",
        "ado_field": "System.Title",
        "mapping_type": "direct",
        "mapping_rules": {},
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def make_feature_flag(flag_id: str, workspace_id: str = WORKSPACE_ID) -> dict:
    return {
        "id": flag_id,
        "workspace_id": workspace_id,
        "name": "grooming_assistant",
        "description": None,
        "enabled": True,
        "conditions": {},
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
        "deleted_at": None,
    }


def make_ai_prompt(prompt_id: str, workspace_id: str = WORKSPACE_ID) -> dict:
    return {
        "id": prompt_id,
        "workspace_id": workspace_id,
        "name": "Split story",
        "description": "Suggest a split",
        "prompt_template": "Split this story: {story}",
        "category": "grooming",
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def uid(n: int) -> str:
    """Deterministic UUID-formatted id."""
    return f"{n:08x}-0000-4000-8000-000000000000"
