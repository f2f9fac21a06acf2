"""
Tests for the Change Notification Rule

End-to-end scenarios from host snapshot to webhook dispatch.
"""

import json

import httpx
import pytest
from unittest.mock import Mock

from conftest import OPEN, CLOSED, ALICE


@pytest.fixture
def dispatcher():
    from notifier.relay.dispatcher import WebhookDispatcher

    return Mock(spec=WebhookDispatcher)


@pytest.fixture
def rule(dispatcher):
    from notifier.relay.detector import ChangeDetector
    from notifier.relay.payload_builder import PayloadBuilder
    from notifier.relay.pipeline import ChangeNotificationRule

    return ChangeNotificationRule(
        detector=ChangeDetector(),
        builder=PayloadBuilder(),
        dispatcher=dispatcher,
    )


class TestChangeNotificationRule:
    """Tests for ChangeNotificationRule.on_change"""

    def test_no_changes_not_dispatched(self, rule, dispatcher, make_context):
        ctx = make_context(fields={"State": OPEN}, oldValues={"State": OPEN}, dirty=["State"])

        assert rule.on_change(ctx) is None
        dispatcher.dispatch.assert_not_called()

    def test_state_and_comment_scenario(self, rule, dispatcher, make_context):
        """State Open -> Closed plus a comment with a structured mention; assignee untouched"""
        from notifier.common.schemas import FieldName

        ctx = make_context(
            fields={"State": CLOSED, "Assignee": ALICE},
            oldValues={"State": OPEN, "Assignee": ALICE},
            dirty=["State"],
            addedComments=[{"text": "ping @{x,y,Name Y,y@ex.com}"}],
        )

        payload = rule.on_change(ctx)

        dispatcher.dispatch.assert_called_once_with(payload)
        assert [c.field for c in payload.changes] == [FieldName.STATE, FieldName.COMMENT]
        mentioned = payload.changes[1].new_value.mentioned_users
        assert len(mentioned) == 1
        assert mentioned[0].login == "y"

    def test_first_match_rule(self, dispatcher, make_context):
        from notifier.common.schemas import EmissionPolicy, FieldName
        from notifier.relay.detector import ChangeDetector
        from notifier.relay.payload_builder import PayloadBuilder
        from notifier.relay.pipeline import ChangeNotificationRule

        rule = ChangeNotificationRule(
            detector=ChangeDetector(policy=EmissionPolicy.FIRST_MATCH),
            builder=PayloadBuilder(),
            dispatcher=dispatcher,
        )
        ctx = make_context(
            oldValues={"State": OPEN},
            dirty=["State"],
            addedComments=[{"text": "closing"}],
        )

        payload = rule.on_change(ctx)

        assert [c.field for c in payload.changes] == [FieldName.STATE]
        dispatcher.dispatch.assert_called_once()

    def test_dispatch_failure_does_not_reach_host(self, make_context):
        """A dead endpoint must not fail the update"""
        from notifier.relay.detector import ChangeDetector
        from notifier.relay.dispatcher import WebhookDispatcher
        from notifier.relay.payload_builder import PayloadBuilder
        from notifier.relay.pipeline import ChangeNotificationRule

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        rule = ChangeNotificationRule(
            detector=ChangeDetector(),
            builder=PayloadBuilder(),
            dispatcher=WebhookDispatcher("http://hooks.test/", transport=httpx.MockTransport(refuse)),
        )
        ctx = make_context(addedComments=[{"text": "anyone?"}])

        payload = rule.on_change(ctx)

        assert payload is not None

    def test_delivered_body(self, make_context):
        from notifier.relay.detector import ChangeDetector
        from notifier.relay.dispatcher import WebhookDispatcher
        from notifier.relay.payload_builder import PayloadBuilder
        from notifier.relay.pipeline import ChangeNotificationRule

        bodies = []

        def capture(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200)

        rule = ChangeNotificationRule(
            detector=ChangeDetector(),
            builder=PayloadBuilder(),
            dispatcher=WebhookDispatcher("http://hooks.test/", transport=httpx.MockTransport(capture)),
        )
        ctx = make_context(
            users=[{"fullName": "Alice", "login": "alice", "email": ""}],
            addedComments=[{"text": "@alice can you take this?"}],
        )

        rule.on_change(ctx)

        assert len(bodies) == 1
        assert bodies[0]["project"] == {"name": "Demo", "presentation": "Demo Project"}
        assert bodies[0]["changes"] == [{
            "field": "Comment",
            "oldValue": None,
            "newValue": {
                "text": "@alice can you take this?",
                "mentionedUsers": [{"fullName": "Alice", "login": "alice", "email": None}],
            },
        }]


    def test_malformed_values_do_not_reach_host(self, rule, dispatcher, make_context):
        """Wrongly typed snapshot values degrade instead of raising"""
        from notifier.common.schemas import FieldName

        ctx = make_context(
            issue={"id": "2-5", "summary": 42, "project": "DEMO"},
            fields={"State": {"name": 2}, "Assignee": {"login": 7}},
            oldValues={"State": {"name": 1}},
            dirty=["State", "Assignee", 3],
            addedComments=[{"text": 5}, 9],
        )

        payload = rule.on_change(ctx)

        assert [c.field for c in payload.changes] == [FieldName.ASSIGNEE]
        assert payload.changes[0].new_value.login is None
        assert payload.issue.summary == ""
        dispatcher.dispatch.assert_called_once_with(payload)


class TestRuleDescription:
    """Tests for requirements and wiring"""

    def test_requirements(self):
        from notifier.relay.pipeline import ChangeNotificationRule

        described = ChangeNotificationRule.describe()

        assert described["title"] == "Send Task Notifications to Webhook"
        assert described["requirements"] == {
            "State": {"type": "enum"},
            "Priority": {"type": "enum"},
            "Assignee": {"type": "user"},
        }

    def test_from_config(self):
        from notifier.common.config import NotifierConfig
        from notifier.common.schemas import EmissionPolicy
        from notifier.relay.pipeline import ChangeNotificationRule

        config = NotifierConfig()
        config.relay.emission_policy = "first-match"

        rule = ChangeNotificationRule.from_config(config)

        assert rule.detector.policy == EmissionPolicy.FIRST_MATCH
