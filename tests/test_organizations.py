from nexus.models.role import OrganizationRole
from tests.conftest import add_member, headers_for


class TestListUserOrganizations:
    """Tests for GET /api/organizations"""

    def test_lists_memberships_with_roles(self, client, db_session, test_user, organization, owner_membership):
        """User sees every organization they belong to with their role"""
        from nexus.models.organization import Organization
        from nexus.models.organization_membership import OrganizationMembership

        other = Organization(name="Family Shop")
        db_session.add(other)
        db_session.commit()
        db_session.add(
            OrganizationMembership(org_id=other.id, user_id=test_user.id, role=OrganizationRole.VIEWER)
        )
        db_session.commit()

        response = client.get("/api/organizations", headers=headers_for("test-user-123"))

        assert response.status_code == 200
        orgs = {o["name"]: o for o in response.json()}
        assert orgs["Test Business"]["role"] == OrganizationRole.OWNER
        assert orgs["Family Shop"]["role"] == OrganizationRole.VIEWER

    def test_new_user_has_no_organizations_yet(self, client):
        """Listing does not provision a personal organization"""
        response = client.get("/api/organizations", headers=headers_for("brand-new"))

        assert response.status_code == 200
        assert response.json() == []


class TestCurrentOrganization:
    """Tests for GET/PATCH /api/organizations/me"""

    def test_get_current_organization(self, client, owner_headers, organization):
        response = client.get("/api/organizations/me", headers=owner_headers)

        assert response.status_code == 200
        assert response.json()["id"] == organization.id
        assert response.json()["name"] == "Test Business"

    def test_owner_can_rename(self, client, owner_headers):
        response = client.patch(
            "/api/organizations/me", json={"name": "Renamed Business"}, headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Renamed Business"

    def test_member_cannot_rename(self, client, member_headers):
        response = client.patch(
            "/api/organizations/me", json={"name": "Nope"}, headers=member_headers
        )

        assert response.status_code == 403

    def test_token_org_selects_organization(self, client, db_session, test_user, organization, owner_membership):
        """org_id claim picks the organization when the user has several"""
        from nexus.models.organization import Organization
        from nexus.models.organization_membership import OrganizationMembership

        second = Organization(name="Second Shop")
        db_session.add(second)
        db_session.commit()
        db_session.add(
            OrganizationMembership(org_id=second.id, user_id=test_user.id, role=OrganizationRole.ADMIN)
        )
        db_session.commit()

        default = client.get("/api/organizations/me", headers=headers_for("test-user-123"))
        chosen = client.get(
            "/api/organizations/me", headers=headers_for("test-user-123", org_id=second.id)
        )

        # Without the claim the oldest membership is used
        assert default.json()["id"] == organization.id
        assert chosen.json()["id"] == second.id


class TestMembers:
    """Tests for /api/organizations/me/members"""

    def test_list_members(self, client, db_session, organization, owner_headers, viewer_headers):
        response = client.get("/api/organizations/me/members", headers=viewer_headers)

        assert response.status_code == 200
        roles = {m["auth_user_id"]: m["role"] for m in response.json()}
        assert roles == {"test-user-123": "owner", "viewer-user": "viewer"}

    def test_owner_invites_member(self, client, owner_headers):
        response = client.post(
            "/api/organizations/me/members",
            json={"auth_user_id": "new-colleague"},
            headers=owner_headers,
        )

        assert response.status_code == 201
        assert response.json()["auth_user_id"] == "new-colleague"
        assert response.json()["role"] == "member"

    def test_invite_existing_member_rejected(self, client, owner_headers, viewer_headers):
        response = client.post(
            "/api/organizations/me/members",
            json={"auth_user_id": "viewer-user"},
            headers=owner_headers,
        )

        assert response.status_code == 400
        assert "already a member" in response.json()["detail"]

    def test_member_cannot_invite(self, client, member_headers):
        response = client.post(
            "/api/organizations/me/members",
            json={"auth_user_id": "someone"},
            headers=member_headers,
        )

        assert response.status_code == 403

    def test_admin_cannot_invite_owner(self, client, db_session, organization, owner_membership):
        add_member(db_session, organization, "admin-user", OrganizationRole.ADMIN)
        headers = headers_for("admin-user", org_id=organization.id)

        response = client.post(
            "/api/organizations/me/members",
            json={"auth_user_id": "someone", "role": "owner"},
            headers=headers,
        )

        assert response.status_code == 403

    def test_owner_changes_role(self, client, db_session, organization, owner_headers):
        viewer = add_member(db_session, organization, "promote-me", OrganizationRole.VIEWER)

        response = client.patch(
            f"/api/organizations/me/members/{viewer.id}/role",
            json={"role": "admin"},
            headers=owner_headers,
        )

        assert response.status_code == 200
        assert response.json()["role"] == "admin"

    def test_owner_cannot_change_own_role(self, client, test_user, owner_headers):
        response = client.patch(
            f"/api/organizations/me/members/{test_user.id}/role",
            json={"role": "viewer"},
            headers=owner_headers,
        )

        assert response.status_code == 403

    def test_remove_member(self, client, db_session, organization, owner_headers):
        member = add_member(db_session, organization, "leaving", OrganizationRole.MEMBER)

        response = client.delete(
            f"/api/organizations/me/members/{member.id}", headers=owner_headers
        )

        assert response.status_code == 200
        assert response.json()["removed_user_id"] == member.id

        members = client.get("/api/organizations/me/members", headers=owner_headers).json()
        assert "leaving" not in [m["auth_user_id"] for m in members]

    def test_cannot_remove_owner(self, client, db_session, organization, test_user, owner_membership):
        add_member(db_session, organization, "admin-user", OrganizationRole.ADMIN)
        headers = headers_for("admin-user", org_id=organization.id)

        response = client.delete(f"/api/organizations/me/members/{test_user.id}", headers=headers)

        assert response.status_code == 403

    def test_remove_unknown_member_not_found(self, client, owner_headers):
        response = client.delete("/api/organizations/me/members/9999", headers=owner_headers)

        assert response.status_code == 404


class TestViewerIsReadOnly:
    """VIEWER can read but not change business records"""

    def test_viewer_can_list(self, client, viewer_headers):
        assert client.get("/api/products", headers=viewer_headers).status_code == 200
        assert client.get("/api/customers/stats", headers=viewer_headers).status_code == 200

    def test_viewer_cannot_create(self, client, viewer_headers):
        response = client.post(
            "/api/products", json={"name": "Blocked"}, headers=viewer_headers
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "Viewers have read-only access"

    def test_member_can_create(self, client, member_headers):
        response = client.post(
            "/api/buildings",
            json={"name": "Member Block", "address": "1 Side St"},
            headers=member_headers,
        )

        assert response.status_code == 201
