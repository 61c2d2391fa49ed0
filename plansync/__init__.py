"""PlanSync: planning hierarchy builder and workspace snapshot validator."""
