"""Convert raw Okta records into graph entities.

Every function here is pure: missing or malformed fields leave the
matching property unset instead of raising.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .config import Settings
from .constants import (
    ACCOUNT_ENTITY_TYPE,
    ACTIVE_STATUS,
    APP_USER_GROUP_ENTITY_TYPE,
    APPLICATION_ENTITY_TYPE,
    MFA_DEVICE_ENTITY_TYPE,
    ROLE_ENTITY_TYPE,
    RULE_ENTITY_TYPE,
    USER_ENTITY_TYPE,
    USER_GROUP_ENTITY_TYPE,
)
from .graph import Entity
from .util import build_web_link, get_account_info, get_admin_url, parse_time, to_array
from .vendors import build_app_short_name, get_account_name, get_vendor_name, is_multi_instance_app

AWS_ACCOUNT_ID_PATTERN = re.compile(r"^arn:aws:iam::([0-9]+):")


def _dig(record: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(record, dict):
            return None
        record = record.get(key)
    return record


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def create_account_entity(settings: Settings, support_settings: Optional[Dict[str, Any]] = None) -> Entity:
    info = get_account_info(settings.okta_org_url)
    support = _mapping(support_settings)
    return Entity(
        key=f"okta_account_{info.name}",
        type=ACCOUNT_ENTITY_TYPE,
        entity_class="Account",
        properties={
            "name": info.name,
            "display_name": info.name,
            "account_url": settings.okta_org_url,
            "web_link": get_admin_url(settings.okta_org_url),
            "is_preview": info.preview,
            "support_enabled": support.get("support") == "ENABLED" if support else None,
            "support_expiration": parse_time(support.get("expiration")),
        },
    )


def create_user_entity(settings: Settings, user: Dict[str, Any]) -> Entity:
    user_id = user.get("id")
    profile = _mapping(user.get("profile"))
    first = profile.get("firstName")
    last = profile.get("lastName")
    full_name = " ".join(part for part in (first, last) if isinstance(part, str) and part) or None
    status = user.get("status")
    return Entity(
        key=user_id,
        type=USER_ENTITY_TYPE,
        entity_class="User",
        properties={
            "id": user_id,
            "name": full_name or profile.get("login") or user_id,
            "display_name": profile.get("login") or full_name or user_id,
            "username": profile.get("login"),
            "email": profile.get("email"),
            "first_name": first,
            "last_name": last,
            "employee_type": profile.get("employeeType"),
            "department": profile.get("department"),
            "manager": profile.get("manager"),
            "status": status,
            "active": status == ACTIVE_STATUS,
            "deprovisioned": status == "DEPROVISIONED",
            "created": parse_time(user.get("created")),
            "activated": parse_time(user.get("activated")),
            "status_changed": parse_time(user.get("statusChanged")),
            "last_login": parse_time(user.get("lastLogin")),
            "last_updated": parse_time(user.get("lastUpdated")),
            "password_changed": parse_time(user.get("passwordChanged")),
            "web_link": build_web_link(settings.okta_org_url, f"/admin/user/profile/view/{user_id}"),
        },
    )


def create_group_entity(settings: Settings, group: Dict[str, Any]) -> Entity:
    group_id = group.get("id")
    profile = _mapping(group.get("profile"))
    entity_type = APP_USER_GROUP_ENTITY_TYPE if group.get("type") == "APP_GROUP" else USER_GROUP_ENTITY_TYPE
    return Entity(
        key=group_id,
        type=entity_type,
        entity_class="UserGroup",
        properties={
            "id": group_id,
            "name": profile.get("name"),
            "display_name": profile.get("name") or group_id,
            "description": profile.get("description"),
            "type": group.get("type"),
            "object_class": group.get("objectClass"),
            "created": parse_time(group.get("created")),
            "last_updated": parse_time(group.get("lastUpdated")),
            "last_membership_updated": parse_time(group.get("lastMembershipUpdated")),
            "web_link": build_web_link(settings.okta_org_url, f"/admin/group/{group_id}"),
        },
    )


def _dict_links(links: List[Any]) -> List[Dict[str, Any]]:
    return [link for link in links if isinstance(link, dict)]


def create_application_entity(settings: Settings, app: Dict[str, Any]) -> Entity:
    """Map an Okta application, inferring vendor and cloud account details.

    At most one of the AWS, GitHub org or domain branches applies,
    keyed on ``settings.app``.
    """
    app_id = app.get("id")
    links = _mapping(app.get("_links"))
    logos = _dict_links(to_array(links.get("logo")))
    app_links = _dict_links(to_array(links.get("appLinks")))
    login_link = next((link for link in app_links if link.get("name") == "login"), None)
    if login_link is None and app_links:
        login_link = app_links[0]

    short_name = build_app_short_name(get_account_info(settings.okta_org_url), app.get("name"))
    sign_on_mode = app.get("signOnMode")
    status = app.get("status")

    props: Dict[str, Any] = {
        "id": app_id,
        "name": app.get("name") or app.get("label"),
        "display_name": app.get("label") or app.get("name") or app_id,
        "short_name": short_name,
        "label": app.get("label"),
        "status": status,
        "active": status == ACTIVE_STATUS,
        "created": parse_time(app.get("created")),
        "last_updated": parse_time(app.get("lastUpdated")),
        "features": app.get("features"),
        "sign_on_mode": sign_on_mode,
        "app_vendor_name": get_vendor_name(short_name),
        "app_account_type": get_account_name(short_name),
        "is_multi_instance_app": is_multi_instance_app(short_name),
        "is_saml_app": isinstance(sign_on_mode, str) and sign_on_mode.startswith("SAML"),
        "web_link": build_web_link(
            settings.okta_org_url, f"/admin/app/{app.get('name')}/instance/{app_id}"
        ),
        "image_url": logos[0].get("href") if logos else None,
        "login_url": login_link.get("href") if login_link else None,
    }

    app_settings = _dig(app, "settings", "app")
    if isinstance(app_settings, dict):
        if app_settings.get("awsEnvironmentType") == "aws.amazon":
            idp_arn = app_settings.get("identityProviderArn")
            match = AWS_ACCOUNT_ID_PATTERN.match(idp_arn) if isinstance(idp_arn, str) else None
            if match:
                props["aws_account_id"] = match.group(1)
                props["app_account_id"] = match.group(1)
            props["aws_identity_provider_arn"] = idp_arn
            props["aws_environment_type"] = app_settings.get("awsEnvironmentType")
            props["aws_group_filter"] = app_settings.get("groupFilter")
            props["aws_role_value_pattern"] = app_settings.get("roleValuePattern")
            props["aws_join_all_roles"] = app_settings.get("joinAllRoles")
            props["aws_session_duration"] = app_settings.get("sessionDuration")
        elif app_settings.get("githubOrg"):
            props["github_org"] = app_settings["githubOrg"]
            props["app_account_id"] = app_settings["githubOrg"]
        elif app_settings.get("domain"):
            # Google Cloud Platform and G Suite use the domain as account identifier
            props["app_domain"] = app_settings["domain"]
            props["app_account_id"] = app_settings["domain"]

    return Entity(key=app_id, type=APPLICATION_ENTITY_TYPE, entity_class="Application", properties=props)


def create_mfa_device_entity(factor: Dict[str, Any]) -> Entity:
    factor_id = factor.get("id")
    status = factor.get("status")
    factor_type = factor.get("factorType")
    provider = factor.get("provider")
    label = f"{provider} {factor_type}" if provider and factor_type else factor_type or factor_id
    return Entity(
        key=factor_id,
        type=MFA_DEVICE_ENTITY_TYPE,
        entity_class="Key",
        properties={
            "id": factor_id,
            "name": label,
            "display_name": label,
            "factor_type": factor_type,
            "provider": provider,
            "vendor_name": factor.get("vendorName"),
            "device": _dig(factor, "profile", "credentialId"),
            "device_type": _dig(factor, "profile", "deviceType"),
            "status": status,
            "active": status == ACTIVE_STATUS,
            "created": parse_time(factor.get("created")),
            "last_updated": parse_time(factor.get("lastUpdated")),
        },
    )


def create_rule_entity(settings: Settings, rule: Dict[str, Any]) -> Entity:
    rule_id = rule.get("id")
    status = rule.get("status")
    return Entity(
        key=rule_id,
        type=RULE_ENTITY_TYPE,
        entity_class="Configuration",
        properties={
            "id": rule_id,
            "name": rule.get("name"),
            "display_name": rule.get("name") or rule_id,
            "rule_type": rule.get("type"),
            "status": status,
            "active": status == ACTIVE_STATUS,
            "condition_expression": _dig(rule, "conditions", "expression", "value"),
            "group_ids": to_array(_dig(rule, "actions", "assignUserToGroups", "groupIds")),
            "excluded_user_ids": to_array(_dig(rule, "conditions", "people", "users", "exclude")),
            "created": parse_time(rule.get("created")),
            "last_updated": parse_time(rule.get("lastUpdated")),
            "web_link": build_web_link(settings.okta_org_url, "/admin/groups#rules"),
        },
    )


def create_role_entity(role: Dict[str, Any]) -> Entity:
    role_id = role.get("id")
    status = role.get("status")
    return Entity(
        key=role_id,
        type=ROLE_ENTITY_TYPE,
        entity_class="AccessRole",
        properties={
            "id": role_id,
            "name": role.get("type"),
            "display_name": role.get("label") or role.get("type") or role_id,
            "role_type": role.get("type"),
            "label": role.get("label"),
            "assignment_type": role.get("assignmentType"),
            "status": status,
            "active": status == ACTIVE_STATUS,
            "created": parse_time(role.get("created")),
            "last_updated": parse_time(role.get("lastUpdated")),
        },
    )
