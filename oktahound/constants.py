"""OktaHound constants.

Entity and relationship type names, job-state data keys and query
values shared by the client and the sync steps.
"""

# Entity types
ACCOUNT_ENTITY_TYPE = "okta_account"
USER_ENTITY_TYPE = "okta_user"
USER_GROUP_ENTITY_TYPE = "okta_user_group"
APP_USER_GROUP_ENTITY_TYPE = "okta_app_user_group"
APPLICATION_ENTITY_TYPE = "okta_application"
MFA_DEVICE_ENTITY_TYPE = "mfa_device"
RULE_ENTITY_TYPE = "okta_rule"
ROLE_ENTITY_TYPE = "okta_role"
AWS_IAM_ROLE_ENTITY_TYPE = "aws_iam_role"

# Relationship types for mapped AWS IAM role assignments
USER_AWS_IAM_ROLE_RELATIONSHIP_TYPE = "aws_iam_role_assigned_okta_user"
GROUP_AWS_IAM_ROLE_RELATIONSHIP_TYPE = "aws_iam_role_assigned_okta_user_group"

# Job-state data keys
ACCOUNT_ENTITY_DATA_KEY = "ACCOUNT_ENTITY"

# Users excluded from the default listing
DEPROVISIONED_USERS_FILTER = 'status eq "DEPROVISIONED"'

# System log query selecting newly created applications
APP_CREATED_LOG_FILTER = (
    'eventType eq "application.lifecycle.update" '
    'and debugContext.debugData.requestUri ew "_new_"'
)

# Okta keeps 90 days of system log; the API default look-back is 7 days
LOG_LOOKBACK_DAYS = 90

# Pagination
DEFAULT_PAGE_LIMIT = 200

ACTIVE_STATUS = "ACTIVE"
