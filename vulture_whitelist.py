"""Vulture whitelist — false positives that are actually used by frameworks."""

# ---------------------------------------------------------------------------
# Public API methods on JWKSmith (used by consumers, not internally)
# ---------------------------------------------------------------------------
from jwksmith.jwksmith import JWKSmith

JWKSmith.on
JWKSmith.add_hook
JWKSmith.config
JWKSmith.lifecycle
JWKSmith.session_factory
JWKSmith.hooks
JWKSmith.get_jwks
JWKSmith.get_signing_key
JWKSmith.run_sweep
JWKSmith.start_sweeper
JWKSmith.stop_sweeper
JWKSmith.jwks_router
JWKSmith.admin_router
JWKSmith.migrate

# ---------------------------------------------------------------------------
# FastAPI route handlers (registered via decorators, not called directly)
# ---------------------------------------------------------------------------
_.jwks_endpoint
_.create_key_endpoint
_.list_keys_endpoint
_.get_key_endpoint
_.delete_key_endpoint

# ---------------------------------------------------------------------------
# Pydantic / dataclass fields (used for serialization, not accessed in code)
# ---------------------------------------------------------------------------
_.timestamp
_.keys
_.reason

# ---------------------------------------------------------------------------
# Alembic migration variables (required by Alembic framework)
# ---------------------------------------------------------------------------
_.revision
_.down_revision
_.branch_labels
_.depends_on
_.downgrade

# ---------------------------------------------------------------------------
# Alembic include_name / include_object callback params (required by signature)
# ---------------------------------------------------------------------------
_.parent_names
_.compare_to
_.reflected

# ---------------------------------------------------------------------------
# SQLAlchemy TypeDecorator (required by SQLAlchemy framework)
# ---------------------------------------------------------------------------
from jwksmith.utils import TZDateTime

TZDateTime.impl
TZDateTime.cache_ok
TZDateTime.process_bind_param
TZDateTime.process_result_value
_.dialect  # required param in TypeDecorator hooks
