import pytest
from unittest.mock import MagicMock

from supabase import AuthError, PostgrestAPIError

from modules.auth.models import ProfileStatus
from modules.distributors.exceptions import (
    DistributorExistsError,
    DistributorNotFoundError,
    InvitationError,
)
from modules.distributors.models import (
    CompanyRole,
    DistributorFilters,
    InviteCompanyUserRequest,
    InviteDistributorRequest,
    UpdateDistributorRequest,
)
from modules.distributors.service import DistributorService
from shared.exceptions import PermissionDeniedError, ValidationError
from tests.conftest import make_settings
from tests.modules.content.conftest import make_db

INVITED_ID = "5b0f6a8e-2d7c-4c1e-9a43-0f1d2c3b4a59"


def distributor_row(distributor_id="dist-1", /, **fields):
    row = {
        "id": distributor_id,
        "email": "sales@acme-medical.com",
        "full_name": "Dana Rep",
        "company_name": "Acme Medical",
        "role": "distributor",
        "status": "active",
        "territory": "Benelux",
    }
    row.update(fields)
    return row


def results(*batches) -> list[MagicMock]:
    return [MagicMock(data=rows) for rows in batches]


def make_service(db) -> DistributorService:
    db.auth.admin.invite_user_by_email.return_value.user.id = INVITED_ID
    return DistributorService(db, make_settings(frontend_url="https://portal.example"))


class TestListDistributors:
    @pytest.mark.asyncio
    async def test_filters_and_order(self):
        db = make_db([distributor_row()])
        filters = DistributorFilters(
            statuses=[ProfileStatus.PENDING], territories=["Benelux"], search="acme,"
        )

        distributors = await make_service(db).list_distributors(filters)

        assert distributors[0].company_name == "Acme Medical"
        db.query.eq.assert_called_once_with("role", "distributor")
        assert db.query.in_.call_args_list[0].args == ("status", ["pending"])
        assert db.query.in_.call_args_list[1].args == ("territory", ["Benelux"])
        assert "company_name.ilike.%acme%" in db.query.or_.call_args[0][0]
        db.query.order.assert_called_once_with("created_at", desc=True)

    @pytest.mark.asyncio
    async def test_missing(self):
        with pytest.raises(DistributorNotFoundError):
            await make_service(make_db([])).get_distributor("dist-404")


class TestInviteDistributor:
    @pytest.mark.asyncio
    async def test_invites_then_writes_pending_profile(self, admin_user):
        db = make_db()
        db.query.execute.side_effect = results([], [distributor_row(INVITED_ID, status="pending")])
        request = InviteDistributorRequest(
            email="Sales@Acme-Medical.com", full_name="Dana Rep", company_name="Acme Medical"
        )

        distributor = await make_service(db).invite_distributor(request, admin_user)

        db.auth.admin.invite_user_by_email.assert_called_once_with(
            "sales@acme-medical.com",
            {
                "redirect_to": "https://portal.example/auth/callback?type=invite",
                "data": {"full_name": "Dana Rep", "company_name": "Acme Medical", "role": "distributor"},
            },
        )
        profile = db.query.insert.call_args[0][0]
        assert profile["id"] == INVITED_ID
        assert profile["email"] == "sales@acme-medical.com"
        assert profile["status"] == "pending"
        assert profile["invited_at"]
        assert distributor.status == ProfileStatus.PENDING

    @pytest.mark.asyncio
    async def test_existing_email(self, admin_user):
        db = make_db([{"id": "user-7"}])
        with pytest.raises(DistributorExistsError):
            await make_service(db).invite_distributor(
                InviteDistributorRequest(email="sales@acme-medical.com"), admin_user
            )
        db.auth.admin.invite_user_by_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_provider_refuses_invite(self, admin_user):
        db = make_db([])
        service = make_service(db)
        db.auth.admin.invite_user_by_email.side_effect = AuthError("Email rate limit exceeded", None)

        with pytest.raises(InvitationError, match="rate limit"):
            await service.invite_distributor(InviteDistributorRequest(email="sales@acme-medical.com"), admin_user)
        db.query.insert.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_profile_insert_removes_auth_user(self, admin_user):
        db = make_db()
        db.query.execute.side_effect = [
            MagicMock(data=[]),
            PostgrestAPIError({"message": "violates row-level security policy", "code": "42501"}),
        ]

        with pytest.raises(PostgrestAPIError):
            await make_service(db).invite_distributor(
                InviteDistributorRequest(email="sales@acme-medical.com"), admin_user
            )
        db.auth.admin.delete_user.assert_called_once_with(INVITED_ID)


class TestInviteCompanyUser:
    @pytest.mark.asyncio
    async def test_joins_the_company(self, admin_user):
        db = make_db()
        db.query.execute.side_effect = results(
            [distributor_row()], [], [distributor_row(INVITED_ID, distributor_id="dist-1", status="pending")]
        )
        request = InviteCompanyUserRequest(
            email="tech@acme-medical.com", full_name="Tom Tech", company_role=CompanyRole.MANAGER
        )

        await make_service(db).invite_company_user("dist-1", request, admin_user)

        profile = db.query.insert.call_args[0][0]
        assert profile["distributor_id"] == "dist-1"
        assert profile["company_role"] == "manager"
        assert profile["company_name"] == "Acme Medical"
        assert profile["territory"] == "Benelux"


class TestInvitationLifecycle:
    @pytest.mark.asyncio
    async def test_resend_sends_reset_link(self):
        db = make_db([distributor_row(status="pending")])
        await make_service(db).resend_invitation("dist-1")

        db.auth.reset_password_for_email.assert_called_once_with(
            "sales@acme-medical.com", {"redirect_to": "https://portal.example/reset-password"}
        )
        changes = db.query.update.call_args[0][0]
        assert changes["status"] == "pending"
        assert changes["invited_at"]

    @pytest.mark.asyncio
    async def test_resend_refused_once_accepted(self):
        db = make_db([distributor_row(status="active")])
        with pytest.raises(ValidationError):
            await make_service(db).resend_invitation("dist-1")
        db.auth.reset_password_for_email.assert_not_called()

    @pytest.mark.asyncio
    async def test_activate_and_deactivate(self):
        db = make_db([distributor_row(status="pending")])
        service = make_service(db)

        await service.activate("dist-1")
        assert db.query.update.call_args[0][0]["status"] == "active"
        await service.deactivate("dist-1")
        assert db.query.update.call_args[0][0]["status"] == "inactive"

    @pytest.mark.asyncio
    async def test_update_matched_nothing(self):
        db = make_db()
        db.query.execute.side_effect = results([distributor_row()], [])
        with pytest.raises(PermissionDeniedError):
            await make_service(db).update_distributor("dist-1", UpdateDistributorRequest(territory=None))

    @pytest.mark.asyncio
    async def test_stats(self):
        rows = [
            {"id": "1", "status": "active"},
            {"id": "2", "status": "pending"},
            {"id": "3", "status": "pending"},
            {"id": "4", "status": "inactive"},
        ]
        stats = await make_service(make_db(rows)).get_stats()
        assert (stats.total, stats.active, stats.pending, stats.inactive) == (4, 1, 2, 1)
