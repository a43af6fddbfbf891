"""
Tests for the resolver surface: conversations, channels, engage messages
and companies.
Run: pytest tests/test_resolvers.py -v
"""
import pytest

from helpdesk.db.models import ConversationModel, ConversationReaderModel
from helpdesk.queries.conversation_query_builder import ConversationListArgs
from helpdesk.resolvers import channels, companies, conversations, engages
from helpdesk.resolvers.engages import EngageListArgs
from tests.helpers import add_rows


def ids(docs):
    return [d.id for d in docs]


# ══════════════════════════════════════════════════════════════════
# CONVERSATIONS
# ══════════════════════════════════════════════════════════════════


class TestConversationResolvers:

    @pytest.mark.asyncio
    async def test_list_sorted_by_last_activity(self, seeded_store, alice):
        result = await conversations.conversations(seeded_store, ConversationListArgs(), alice)
        assert ids(result) == ["cv6", "cv2", "cv1"]
        assert sorted(result[1].tag_ids) == ["t1", "t2"]

    @pytest.mark.asyncio
    async def test_list_limit(self, seeded_store, alice):
        result = await conversations.conversations(seeded_store, ConversationListArgs(limit=1), alice)
        assert ids(result) == ["cv6"]

    @pytest.mark.asyncio
    async def test_explicit_ids_bypass_filters(self, seeded_store, alice):
        args = ConversationListArgs(ids=["cv3", "cv4"], status="new")
        result = await conversations.conversations(seeded_store, args, alice)
        assert ids(result) == ["cv4", "cv3"]

    @pytest.mark.asyncio
    async def test_total_count_and_last(self, seeded_store, alice):
        args = ConversationListArgs()
        assert await conversations.conversations_total_count(seeded_store, args, alice) == 3
        last = await conversations.conversations_get_last(seeded_store, args, alice)
        assert last.id == "cv6"

    @pytest.mark.asyncio
    async def test_last_without_matches(self, seeded_store, carol):
        assert await conversations.conversations_get_last(seeded_store, ConversationListArgs(), carol) is None

    @pytest.mark.asyncio
    async def test_detail(self, seeded_store):
        conversation = await conversations.conversation_detail(seeded_store, "cv2")
        assert conversation.status == "open"
        assert conversation.read_user_ids == ["u1"]
        assert await conversations.conversation_detail(seeded_store, "missing") is None

    @pytest.mark.asyncio
    async def test_counts(self, seeded_store, alice):
        args = ConversationListArgs(only="by_tags")
        counts = await conversations.conversation_counts(seeded_store, args, alice)
        assert counts.by_tags == {"t1": 2, "t2": 1}
        assert counts.resolved == 1


class TestConversationMessages:

    @pytest.mark.asyncio
    async def test_all_messages_oldest_first(self, seeded_store):
        result = await conversations.conversation_messages(seeded_store, "cv3")
        assert ids(result) == ["m1", "m2", "m3", "m4"]

    @pytest.mark.asyncio
    async def test_limit_returns_newest_page_in_order(self, seeded_store):
        result = await conversations.conversation_messages(seeded_store, "cv3", limit=2)
        assert ids(result) == ["m3", "m4"]

    @pytest.mark.asyncio
    async def test_skip_pages_backwards(self, seeded_store):
        result = await conversations.conversation_messages(seeded_store, "cv3", skip=1, limit=2)
        assert ids(result) == ["m2", "m3"]

    @pytest.mark.asyncio
    async def test_total_count(self, seeded_store):
        assert await conversations.conversation_messages_total_count(seeded_store, "cv3") == 4
        assert await conversations.conversation_messages_total_count(seeded_store, "cv1") == 0


class TestUnreadCount:

    @pytest.mark.asyncio
    async def test_unread_count(self, seeded_store, alice):
        # cv2 is already read by alice; cv5 was never answered by the customer
        assert await conversations.conversations_total_unread_count(seeded_store, alice) == 2

    @pytest.mark.asyncio
    async def test_reading_removes_conversation(self, seeded_store, alice):
        await add_rows(
            seeded_store,
            ConversationModel(id="cv7", integration_id="i2", status="new", message_count=1),
        )
        assert await conversations.conversations_total_unread_count(seeded_store, alice) == 3

        await add_rows(seeded_store, ConversationReaderModel(owner_id="cv7", value="u1"))
        assert await conversations.conversations_total_unread_count(seeded_store, alice) == 2

    @pytest.mark.asyncio
    async def test_no_channels_no_unread(self, seeded_store, carol):
        assert await conversations.conversations_total_unread_count(seeded_store, carol) == 0


# ══════════════════════════════════════════════════════════════════
# CHANNELS
# ══════════════════════════════════════════════════════════════════


class TestChannelResolvers:

    @pytest.mark.asyncio
    async def test_list_newest_first(self, seeded_store):
        assert ids(await channels.channels(seeded_store)) == ["c3", "c2", "c1"]

    @pytest.mark.asyncio
    async def test_list_by_member(self, seeded_store):
        assert ids(await channels.channels(seeded_store, member_ids=["u1"])) == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_pagination(self, seeded_store):
        assert ids(await channels.channels(seeded_store, page=2, per_page=1)) == ["c2"]

    @pytest.mark.asyncio
    async def test_detail_count_and_last(self, seeded_store):
        channel = await channels.channel_detail(seeded_store, "c2")
        assert sorted(channel.member_ids) == ["u1", "u2"]
        assert await channels.channels_total_count(seeded_store) == 3
        assert (await channels.channels_get_last(seeded_store)).id == "c3"


# ══════════════════════════════════════════════════════════════════
# ENGAGE MESSAGES
# ══════════════════════════════════════════════════════════════════


class TestEngageResolvers:

    @pytest.mark.asyncio
    async def test_brand_scoped_viewer(self, seeded_store, bob):
        result = await engages.engage_messages(seeded_store, EngageListArgs(), bob)
        assert ids(result) == ["em3", "em1"]

    @pytest.mark.asyncio
    async def test_unscoped_viewer(self, seeded_store, carol):
        result = await engages.engage_messages(seeded_store, EngageListArgs(), carol)
        assert ids(result) == ["em3", "em2", "em1"]

    @pytest.mark.asyncio
    async def test_kind_status_and_tag(self, seeded_store, bob):
        async def listed(**kwargs):
            return ids(await engages.engage_messages(seeded_store, EngageListArgs(**kwargs), bob))

        assert await listed(kind="auto") == ["em1"]
        assert await listed(status="live") == ["em1"]
        assert await listed(status="paused") == ["em3"]
        assert await listed(status="yours") == ["em3", "em1"]
        assert await listed(status="draft") == []
        assert await listed(status="whatever") == ["em3", "em1"]
        assert await listed(tag="e1") == ["em1"]

    @pytest.mark.asyncio
    async def test_id_lists_are_exclusive(self, seeded_store, carol):
        args = EngageListArgs(segment_ids=["s1"], kind="auto")
        assert ids(await engages.engage_messages(seeded_store, args, carol)) == ["em3", "em2"]

    @pytest.mark.asyncio
    async def test_scope_still_applies_to_ids(self, seeded_store, bob):
        args = EngageListArgs(ids=["em2"])
        assert await engages.engage_messages(seeded_store, args, bob) == []

    @pytest.mark.asyncio
    async def test_counts_by_kind(self, seeded_store, bob, carol):
        assert await engages.engage_message_counts(seeded_store, "kind", carol) == {
            "all": 3, "manual": 1, "auto": 1, "visitorAuto": 1,
        }
        assert await engages.engage_message_counts(seeded_store, "kind", bob) == {
            "all": 2, "manual": 0, "auto": 1, "visitorAuto": 1,
        }

    @pytest.mark.asyncio
    async def test_counts_by_status(self, seeded_store, carol):
        assert await engages.engage_message_counts(seeded_store, "status", carol) == {
            "live": 1, "draft": 1, "paused": 2, "yours": 1,
        }

    @pytest.mark.asyncio
    async def test_counts_by_status_within_kind(self, seeded_store, carol):
        counts = await engages.engage_message_counts(seeded_store, "status", carol, kind="manual")
        assert counts == {"live": 0, "draft": 1, "paused": 1, "yours": 1}

    @pytest.mark.asyncio
    async def test_counts_by_tag(self, seeded_store, carol):
        assert await engages.engage_message_counts(seeded_store, "tag", carol) == {"e1": 1}

    @pytest.mark.asyncio
    async def test_detail_and_total(self, seeded_store, bob):
        assert (await engages.engage_message_detail(seeded_store, "em2")).title == "Newsletter"
        assert await engages.engage_messages_total_count(seeded_store, EngageListArgs(), bob) == 2


# ══════════════════════════════════════════════════════════════════
# COMPANIES
# ══════════════════════════════════════════════════════════════════


class TestCompanyResolvers:

    @pytest.mark.asyncio
    async def test_search_matches_name_email_or_website(self, seeded_store):
        assert ids(await companies.companies(seeded_store, search_value="init")) == ["co3", "co1"]
        assert ids(await companies.companies(seeded_store, search_value="HOOLI.XYZ")) == ["co2"]

    @pytest.mark.asyncio
    async def test_wildcards_are_literal(self, seeded_store):
        assert await companies.companies(seeded_store, search_value="%") == []

    @pytest.mark.asyncio
    async def test_ids_and_pagination(self, seeded_store):
        assert ids(await companies.companies(seeded_store, ids=["co2"])) == ["co2"]
        assert ids(await companies.companies(seeded_store, page=2, per_page=2)) == ["co1"]

    @pytest.mark.asyncio
    async def test_detail_and_total(self, seeded_store):
        assert (await companies.company_detail(seeded_store, "co1")).name == "Initech"
        assert await companies.companies_total_count(seeded_store) == 3
        assert await companies.companies_total_count(seeded_store, search_value="init") == 2
