"""Static vendor lookup for Okta applications.

Okta identifies catalog apps by a technical name (``amazon_aws``,
``github``) and custom apps by ``<org>_<name>_<n>``. The short name
strips the org prefix and the instance counter so it can key the
vendor table.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .util import OktaAccountInfo

INSTANCE_SUFFIX_PATTERN = re.compile(r"_\d+$")


@dataclass(frozen=True)
class KnownVendor:
    vendor: str
    account: str
    multi_instance: bool = False


KNOWN_VENDORS: Dict[str, KnownVendor] = {
    "amazon_aws": KnownVendor("Amazon Web Services", "AWS Account", multi_instance=True),
    "aws_account_federation": KnownVendor("Amazon Web Services", "AWS Account", multi_instance=True),
    "amazon_aws_sso": KnownVendor("Amazon Web Services", "AWS SSO"),
    "atlassian": KnownVendor("Atlassian", "Atlassian Cloud", multi_instance=True),
    "box": KnownVendor("Box", "Box Account"),
    "dropbox_for_business": KnownVendor("Dropbox", "Dropbox Business"),
    "github": KnownVendor("GitHub", "GitHub Organization", multi_instance=True),
    "githubcloud": KnownVendor("GitHub", "GitHub Organization", multi_instance=True),
    "google": KnownVendor("Google", "G Suite"),
    "google_cloud_platform": KnownVendor("Google", "GCP Organization", multi_instance=True),
    "office365": KnownVendor("Microsoft", "Office 365"),
    "salesforce": KnownVendor("Salesforce", "Salesforce Org", multi_instance=True),
    "servicenow_ud": KnownVendor("ServiceNow", "ServiceNow Instance", multi_instance=True),
    "slack": KnownVendor("Slack", "Slack Workspace", multi_instance=True),
    "zoomus": KnownVendor("Zoom", "Zoom Account"),
}


def build_app_short_name(account_info: OktaAccountInfo, app_name: Any) -> Optional[str]:
    """Normalize an application's technical name for vendor lookup.

    Example:
        >>> build_app_short_name(OktaAccountInfo("acme", False), "acme_jenkins_1")
        'jenkins'
    """
    if not app_name or not isinstance(app_name, str):
        return None
    short_name = app_name.lower()
    org_prefix = f"{account_info.name.lower()}_"
    if account_info.name and short_name.startswith(org_prefix):
        short_name = short_name[len(org_prefix):]
    return INSTANCE_SUFFIX_PATTERN.sub("", short_name) or app_name.lower()


def get_vendor_name(short_name: Optional[str]) -> Optional[str]:
    known = KNOWN_VENDORS.get(short_name or "")
    return known.vendor if known else short_name


def get_account_name(short_name: Optional[str]) -> Optional[str]:
    known = KNOWN_VENDORS.get(short_name or "")
    return known.account if known else short_name


def is_multi_instance_app(short_name: Optional[str]) -> bool:
    known = KNOWN_VENDORS.get(short_name or "")
    return bool(known and known.multi_instance)
