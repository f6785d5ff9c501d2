"""Composition of invitation messages."""

from __future__ import annotations

from access.domain.aggregates import Invitation, Tenant
from access.domain.roles import get_role
from access.ports.mail import InvitationEmail


def compose_invitation_email(
    invitation: Invitation,
    tenant: Tenant | None,
    inviter_name: str | None,
    accept_url_template: str,
    product_name: str,
) -> InvitationEmail:
    """Build the message announcing an invitation.

    Tenant invitations name the tenant; platform staff invitations name the
    offered role.

    Args:
        invitation: The invitation, carrying its current token
        tenant: Inviting tenant, None for platform staff
        inviter_name: Display name of the inviting user
        accept_url_template: Link template with a {token} placeholder
        product_name: Product name shown in the subject
    """
    role_name = get_role(invitation.role).name
    if tenant is not None:
        subject = f"You're invited to {tenant.name} on {product_name}"
    else:
        subject = f"Your invitation to join as {role_name} on {product_name}"

    return InvitationEmail(
        to=invitation.email,
        subject=subject,
        accept_url=accept_url_template.format(token=invitation.token),
        role_name=role_name,
        tenant_name=tenant.name if tenant else None,
        inviter_name=inviter_name,
        expires_at=invitation.expires_at,
    )
