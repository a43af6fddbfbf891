"""
Shared fixtures for the helpdesk test suite.
"""
import sys
import os
import pytest
import pytest_asyncio

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# Set env vars before any imports that read them
os.environ["ENVIRONMENT"] = "qa"
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///test.db")
os.environ.setdefault("AGGREGATION_CONCURRENCY", "4")

from helpdesk.auth.viewer import Viewer  # noqa: E402
from helpdesk.db.engine import build_engine, build_session_factory, create_tables  # noqa: E402
from helpdesk.db.models import (  # noqa: E402
    BrandModel, ChannelModel, CompanyModel, ConversationMessageModel,
    ConversationModel, EngageMessageModel, IntegrationModel, TagModel, UserModel,
)
from helpdesk.db.store import Store  # noqa: E402
from tests.helpers import add_rows, day  # noqa: E402


# ── Store ─────────────────────────────────────────────────────────

@pytest_asyncio.fixture
async def store(tmp_path):
    """Empty store on a temporary SQLite file."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'helpdesk.db'}", echo=False)
    await create_tables(engine)

    yield Store(build_session_factory(engine))

    await engine.dispose()


@pytest_asyncio.fixture
async def seeded_store(store):
    """
    Store holding a small helpdesk:

    - brands b1 (integrations i1 messenger, i2 form) and b2 (i3 facebook, i4 messenger)
    - channels c1 {u1} → i1, i2; c2 {u1, u2} → i3; c3 {u2} → i4
    - conversation tags t1, t2; customer tag t3; engage tag e1
    - u1 reaches i1, i2, i3 through its channels
    """
    await add_rows(
        store,
        BrandModel(id="b1", name="Acme", code="acme", created_at=day(1)),
        BrandModel(id="b2", name="Globex", code="globex", created_at=day(2)),
        IntegrationModel(id="i1", kind="messenger", name="Acme chat", brand_id="b1"),
        IntegrationModel(id="i2", kind="form", name="Acme form", brand_id="b1"),
        IntegrationModel(id="i3", kind="facebook", name="Globex page", brand_id="b2"),
        IntegrationModel(id="i4", kind="messenger", name="Globex chat", brand_id="b2"),
        ChannelModel(id="c1", name="Acme support", member_ids=["u1"], integration_ids=["i1", "i2"], created_at=day(1)),
        ChannelModel(id="c2", name="Globex social", member_ids=["u1", "u2"], integration_ids=["i3"], created_at=day(2)),
        ChannelModel(id="c3", name="Globex chat", member_ids=["u2"], integration_ids=["i4"], created_at=day(3)),
        TagModel(id="t1", name="billing", type="conversation"),
        TagModel(id="t2", name="bug", type="conversation"),
        TagModel(id="t3", name="vip", type="customer"),
        TagModel(id="e1", name="onboarding", type="engageMessage"),
        UserModel(id="u1", username="alice", roles=["support"], starred_conversation_ids=["cv1", "cv3"]),
        UserModel(id="u2", username="bob", roles=["marketer"], scope_brand_ids=["b2"]),
        UserModel(id="u3", username="carol", roles=["admin"]),
        UserModel(id="u4", username="dave", roles=["admin"], is_active=False),
    )
    await add_rows(
        store,
        ConversationModel(
            id="cv1", content="Invoice is wrong", integration_id="i1", status="new",
            tag_ids=["t1"], participated_user_ids=["u1"], message_count=1,
            created_at=day(1), updated_at=day(1),
        ),
        ConversationModel(
            id="cv2", content="Cannot pay invoice", integration_id="i2", status="open",
            assigned_user_id="u2", tag_ids=["t1", "t2"], read_user_ids=["u1"], message_count=2,
            created_at=day(2), updated_at=day(2),
        ),
        ConversationModel(
            id="cv3", content="App crashes", integration_id="i3", status="closed",
            tag_ids=["t2"], message_count=4, created_at=day(3), updated_at=day(3),
        ),
        ConversationModel(
            id="cv4", content="Hello", integration_id="i4", status="new",
            message_count=1, created_at=day(4), updated_at=day(4),
        ),
        # engage-initiated, customer never replied
        ConversationModel(
            id="cv5", content="Welcome aboard", integration_id="i1", status="new",
            user_id="u3", message_count=1, created_at=day(5), updated_at=day(5),
        ),
        # engage-initiated, customer replied
        ConversationModel(
            id="cv6", content="Welcome back", integration_id="i3", status="open",
            user_id="u3", assigned_user_id="u1", participated_user_ids=["u1"], message_count=3,
            created_at=day(6), updated_at=day(6),
        ),
        ConversationMessageModel(id="m1", conversation_id="cv3", content="first", created_at=day(3, 1)),
        ConversationMessageModel(id="m2", conversation_id="cv3", content="second", created_at=day(3, 2)),
        ConversationMessageModel(id="m3", conversation_id="cv3", content="third", created_at=day(3, 3)),
        ConversationMessageModel(id="m4", conversation_id="cv3", content="fourth", created_at=day(3, 4)),
        EngageMessageModel(
            id="em1", kind="auto", title="Welcome", is_live=True, from_user_id="u2",
            brand_ids=["b2"], tag_ids=["e1"], created_at=day(1),
        ),
        EngageMessageModel(
            id="em2", kind="manual", title="Newsletter", is_draft=True, from_user_id="u3",
            brand_ids=["b1"], segment_ids=["s1"], created_at=day(2),
        ),
        EngageMessageModel(
            id="em3", kind="visitorAuto", title="Pricing nudge", is_live=False, from_user_id="u2",
            brand_ids=["b2"], segment_ids=["s1"], created_at=day(3),
        ),
        CompanyModel(id="co1", name="Initech", email="info@initech.com", website="initech.com", created_at=day(1)),
        CompanyModel(id="co2", name="Hooli", email="hello@hooli.xyz", website="hooli.xyz", created_at=day(2)),
        CompanyModel(id="co3", name="Initrode", email="", website="initrode.example", created_at=day(3)),
    )
    return store


@pytest.fixture
def alice():
    """Support user; member of c1 and c2."""
    return Viewer(id="u1", roles=["support"], starred_conversation_ids=["cv1", "cv3"])


@pytest.fixture
def bob():
    """Marketer scoped to brand b2; member of c2 and c3."""
    return Viewer(id="u2", roles=["marketer"], scope_brand_ids=["b2"])


@pytest.fixture
def carol():
    """Admin with no channel memberships."""
    return Viewer(id="u3", roles=["admin"])
