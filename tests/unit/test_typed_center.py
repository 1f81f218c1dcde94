"""
Unit tests for TypedNotificationCenter

Covers injection of the typed payload on post, extraction and checking on
delivery, and the registration-time name/type contract.
"""
import asyncio
import threading
from typing import Any, List, Tuple

import pytest

from typed_notifications import (
    DeliveryError,
    InMemoryNotificationCenter,
    MissingPayloadError,
    NotificationConstants,
    ObserverError,
    PayloadTypeMismatchError,
    PostError,
    TypedNotificationCenter,
    UnknownNotificationError,
    add_observer,
    build_notification,
    default_center,
    default_typed_center,
    extract_payload,
    post,
)

from sample_notifications import (
    AppHasLaunched,
    AppNotifications,
    AppWillCrash,
    CustomName,
    DownloadedData,
    OtherNotifications,
    SomethingIsWrong,
)


class Recorder:
    """Collects (notification, sender) pairs delivered to a handler"""

    def __init__(self):
        self.calls: List[Tuple[Any, Any]] = []
        self.event = threading.Event()

    def __call__(self, notification, sender):
        self.calls.append((notification, sender))
        self.event.set()


class TestPost:
    """Test posting typed notifications"""

    def test_post_injects_payload_under_reserved_key(self, center, typed_center):
        received = []
        center.add_observer("AppNotifications.downloadedData", received.append)

        note = DownloadedData(title="Test", index=5)
        count = typed_center.post(note)

        assert count == 1
        assert received[0].name == "AppNotifications.downloadedData"
        assert received[0].user_info[NotificationConstants.PAYLOAD_KEY] is note

    def test_post_passes_sender(self, center, typed_center):
        received = []
        center.add_observer(None, received.append)
        sender = object()

        typed_center.post(SomethingIsWrong(), sender=sender)

        assert received[0].sender is sender

    def test_post_merges_extra_user_info(self, center, typed_center):
        received = []
        center.add_observer(None, received.append)

        typed_center.post(SomethingIsWrong(), user_info={"trace": "abc"})

        assert received[0].user_info["trace"] == "abc"
        assert isinstance(received[0].user_info[NotificationConstants.PAYLOAD_KEY], SomethingIsWrong)

    def test_post_rejects_reserved_key_in_user_info(self, typed_center):
        with pytest.raises(PostError):
            typed_center.post(
                SomethingIsWrong(),
                user_info={NotificationConstants.PAYLOAD_KEY: "spoofed"}
            )

    @pytest.mark.parametrize("value", ["AppNotifications.downloadedData", {"title": "x"}, None, 42])
    def test_post_rejects_untyped_values(self, typed_center, value):
        with pytest.raises(PostError):
            typed_center.post(value)

    def test_post_without_observers_returns_zero(self, typed_center):
        assert typed_center.post(SomethingIsWrong()) == 0


class TestObserveVariant:
    """Test observing a single variant class"""

    def test_handler_receives_typed_instance_and_sender(self, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(DownloadedData, recorder)
        sender = object()

        note = DownloadedData(title="Test", index=5)
        typed_center.post(note, sender=sender)

        assert recorder.calls == [(note, sender)]
        assert isinstance(recorder.calls[0][0], DownloadedData)
        assert recorder.calls[0][0].title == "Test"
        assert recorder.calls[0][0].index == 5
        token.cancel()

    def test_handler_only_receives_its_variant(self, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(DownloadedData, recorder)

        typed_center.post(AppHasLaunched(launch_date="2024-01-01T00:00:00"))
        typed_center.post(SomethingIsWrong())

        assert recorder.calls == []
        token.cancel()

    def test_multiple_independent_observers(self, typed_center):
        first, second = Recorder(), Recorder()
        token1 = typed_center.add_observer(DownloadedData, first)
        token2 = typed_center.add_observer(DownloadedData, second)

        count = typed_center.post(DownloadedData(title="t", index=1))

        assert count == 2
        assert len(first.calls) == 1
        assert len(second.calls) == 1

        token1.cancel()
        typed_center.post(DownloadedData(title="t", index=2))

        assert len(first.calls) == 1
        assert len(second.calls) == 2
        token2.cancel()

    def test_sender_filter(self, typed_center):
        recorder = Recorder()
        wanted, other = object(), object()
        token = typed_center.add_observer(DownloadedData, recorder, sender=wanted)

        typed_center.post(DownloadedData(title="a", index=1), sender=other)
        typed_center.post(DownloadedData(title="b", index=2), sender=wanted)

        assert [call[0].title for call in recorder.calls] == ["b"]
        assert recorder.calls[0][1] is wanted
        token.cancel()

    def test_custom_named_variant(self, center, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(CustomName, recorder)

        typed_center.post(CustomName(value=3))

        assert recorder.calls[0][0].value == 3
        assert center.observer_count("custom.notification") == 1
        token.cancel()

    def test_expected_supertype_is_accepted(self, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(DownloadedData, recorder, expected=AppNotifications)

        typed_center.post(DownloadedData(title="t", index=1))

        assert len(recorder.calls) == 1
        token.cancel()

    def test_expected_unrelated_type_is_rejected_at_registration(self, center, typed_center):
        with pytest.raises(PayloadTypeMismatchError):
            typed_center.add_observer(DownloadedData, Recorder(), expected=OtherNotifications)

        assert center.observer_count() == 0


class TestObserveByName:
    """Test the name-based API where the handler's expected type must be declared"""

    def test_matching_type_is_accepted(self, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(
            "AppNotifications.downloadedData", recorder, expected=AppNotifications
        )

        typed_center.post(DownloadedData(title="Test", index=5))

        assert recorder.calls[0][0] == DownloadedData(title="Test", index=5)
        token.cancel()

    def test_mismatched_type_fails_at_registration_not_delivery(self, center, typed_center):
        with pytest.raises(PayloadTypeMismatchError) as exc_info:
            typed_center.add_observer(
                "AppNotifications.downloadedData", Recorder(), expected=OtherNotifications
            )

        assert exc_info.value.expected is OtherNotifications
        assert exc_info.value.actual is DownloadedData
        assert center.observer_count() == 0

        # 发布者不受影响
        assert typed_center.post(DownloadedData(title="Test", index=5)) == 0

    def test_unknown_name_is_rejected(self, typed_center):
        with pytest.raises(UnknownNotificationError):
            typed_center.add_observer("AppNotifications.neverDefined", Recorder())

    def test_name_without_expected_accepts_any_variant(self, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer("custom.notification", recorder)

        typed_center.post(CustomName(value=1))

        assert len(recorder.calls) == 1
        token.cancel()


class TestObserveCatalog:
    """Test observing every variant of a catalog"""

    def test_catalog_observer_receives_all_variants(self, center, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(AppNotifications, recorder)

        assert len(token) == 3
        assert center.observer_count() == 3

        typed_center.post(DownloadedData(title="t", index=1))
        typed_center.post(AppWillCrash(error=ValueError("x")))
        typed_center.post(SomethingIsWrong())

        assert [type(call[0]) for call in recorder.calls] == [DownloadedData, AppWillCrash]

        token.cancel()
        assert center.observer_count() == 0

    def test_empty_catalog_is_rejected(self, typed_center):
        from typed_notifications import NotificationEnum

        class NothingHere(NotificationEnum):
            pass

        with pytest.raises(ObserverError):
            typed_center.add_observer(NothingHere, Recorder())


class TestInvalidTargets:
    """Test rejected observer targets and handlers"""

    @pytest.mark.parametrize("target", [42, dict, object(), None])
    def test_invalid_target(self, typed_center, target):
        with pytest.raises(ObserverError):
            typed_center.add_observer(target, Recorder())

    def test_base_class_is_not_a_target(self, typed_center):
        from typed_notifications import NotificationEnum

        with pytest.raises(ObserverError):
            typed_center.add_observer(NotificationEnum, Recorder())

    def test_handler_must_be_callable(self, typed_center):
        with pytest.raises(ObserverError):
            typed_center.add_observer(DownloadedData, "not callable")


class TestDeliveryChecks:
    """Test the defensive checks applied when a payload is taken out of the untyped channel"""

    def test_untyped_post_on_typed_name_is_reported(self, center, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(DownloadedData, recorder)

        with pytest.raises(DeliveryError) as exc_info:
            center.post("AppNotifications.downloadedData", user_info={"title": "raw"})

        assert isinstance(exc_info.value.errors[0], MissingPayloadError)
        assert recorder.calls == []
        token.cancel()

    def test_wrong_payload_type_on_typed_name_is_reported(self, center, typed_center):
        recorder = Recorder()
        token = typed_center.add_observer(DownloadedData, recorder)

        with pytest.raises(DeliveryError) as exc_info:
            center.post(
                "AppNotifications.downloadedData",
                user_info={NotificationConstants.PAYLOAD_KEY: SomethingIsWrong()}
            )

        error = exc_info.value.errors[0]
        assert isinstance(error, PayloadTypeMismatchError)
        assert error.expected is DownloadedData
        assert error.actual is SomethingIsWrong
        assert recorder.calls == []
        token.cancel()

    def test_delivery_errors_are_logged_when_center_does_not_raise(self):
        center = InMemoryNotificationCenter(raise_errors=False)
        typed_center = TypedNotificationCenter(center)
        recorder = Recorder()
        token = typed_center.add_observer(DownloadedData, recorder)

        assert center.post("AppNotifications.downloadedData") == 1
        assert recorder.calls == []
        token.cancel()

    def test_handler_exception_reaches_poster(self, typed_center):
        def failing(notification, sender):
            raise RuntimeError("handler failed")

        token = typed_center.add_observer(DownloadedData, failing)

        with pytest.raises(DeliveryError) as exc_info:
            typed_center.post(DownloadedData(title="t", index=1))

        assert isinstance(exc_info.value.errors[0], RuntimeError)
        token.cancel()


class TestExtractPayload:
    """Test extract_payload on hand-built notifications"""

    def test_extracts_matching_payload(self):
        note = DownloadedData(title="t", index=1)
        notification = build_notification(
            "AppNotifications.downloadedData",
            user_info={NotificationConstants.PAYLOAD_KEY: note}
        )

        assert extract_payload(notification, DownloadedData) is note
        assert extract_payload(notification, AppNotifications) is note

    def test_missing_user_info(self):
        notification = build_notification("AppNotifications.downloadedData")

        with pytest.raises(MissingPayloadError) as exc_info:
            extract_payload(notification, DownloadedData)

        assert exc_info.value.name == "AppNotifications.downloadedData"

    def test_mismatch(self):
        notification = build_notification(
            "x", user_info={NotificationConstants.PAYLOAD_KEY: "plain string"}
        )

        with pytest.raises(PayloadTypeMismatchError):
            extract_payload(notification, DownloadedData)


class TestQueuedDelivery:
    """Test delivery through an executor"""

    def test_handler_runs_on_queue(self, typed_center, executor):
        threads = []
        done = threading.Event()

        def handler(notification, sender):
            threads.append(threading.current_thread().name)
            done.set()

        token = typed_center.add_observer(DownloadedData, handler, queue=executor)
        typed_center.post(DownloadedData(title="t", index=1))

        assert done.wait(timeout=5)
        assert threads[0].startswith("test-queue")
        token.cancel()


class TestCoroutineHandlers:
    """Test coroutine handlers"""

    def test_coroutine_handler_without_running_loop(self, typed_center):
        received = []

        async def handler(notification, sender):
            await asyncio.sleep(0)
            received.append(notification)

        token = typed_center.add_observer(DownloadedData, handler)
        typed_center.post(DownloadedData(title="t", index=1))

        assert len(received) == 1
        token.cancel()

    @pytest.mark.asyncio
    async def test_coroutine_handler_scheduled_on_running_loop(self, typed_center):
        received = asyncio.Event()
        payloads = []

        async def handler(notification, sender):
            payloads.append(notification)
            received.set()

        token = typed_center.add_observer(DownloadedData, handler)
        typed_center.post(DownloadedData(title="t", index=1))

        await asyncio.wait_for(received.wait(), timeout=5)
        assert payloads[0].title == "t"
        token.cancel()


class TestObserveDecorator:
    """Test the decorator form"""

    def test_decorator_keeps_function_and_attaches_token(self, typed_center):
        received = []

        @typed_center.observe(DownloadedData)
        def on_download(notification, sender):
            received.append(notification.index)

        typed_center.post(DownloadedData(title="t", index=7))

        assert received == [7]
        assert on_download.notification_token.is_active

        on_download.notification_token.cancel()
        typed_center.post(DownloadedData(title="t", index=8))

        assert received == [7]


class TestDefaultCenter:
    """Test module-level helpers bound to the process-wide center"""

    def test_module_level_post_and_observe(self):
        recorder = Recorder()
        token = add_observer(DownloadedData, recorder)

        assert post(DownloadedData(title="t", index=1)) == 1
        assert len(recorder.calls) == 1
        assert default_typed_center().center is default_center()
        token.cancel()

    def test_module_level_post_forwards_user_info(self):
        raw = []
        handle = default_center().add_observer(DownloadedData.notification_name, raw.append)

        post(DownloadedData(title="t", index=1), user_info={"source": "cache"})

        assert raw[0].user_info["source"] == "cache"
        assert raw[0].user_info[NotificationConstants.PAYLOAD_KEY].index == 1
        default_center().remove_observer(handle)

    def test_module_level_post_rejects_reserved_key(self):
        with pytest.raises(PostError):
            post(
                DownloadedData(title="t", index=1),
                user_info={NotificationConstants.PAYLOAD_KEY: "raw"},
            )

    def test_typed_center_defaults_to_process_center(self):
        assert TypedNotificationCenter().center is default_center()
