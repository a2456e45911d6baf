"""Tests for SizeControl."""

from datetime import timedelta


class TestSizeControl:
    """Tests for SizeControl.should_truncate()."""

    def test_regular_never_truncated(self, size_control, regular_transaction):
        """Test that regular transactions are kept."""
        assert size_control.should_truncate(regular_transaction) is False
        assert len(size_control) == 0

    def test_first_slow_retained(self, size_control, slow_transaction):
        """Test that the first slow transaction of an action is kept."""
        assert size_control.should_truncate(slow_transaction) is False
        assert len(size_control) == 1

    def test_faster_slow_truncated(self, size_control, create_transaction, notification_event):
        """Test that a later, faster slow transaction is truncated."""
        slower = create_transaction("slower")
        slower.set_process_event(notification_event(duration=timedelta(seconds=3)))
        faster = create_transaction("faster")
        faster.set_process_event(notification_event(duration=timedelta(seconds=1)))

        assert size_control.should_truncate(slower) is False
        assert size_control.should_truncate(faster) is True

    def test_slower_replaces_retained(self, size_control, create_transaction, notification_event):
        """Test that a slower transaction becomes the retained one."""
        first = create_transaction("first")
        first.set_process_event(notification_event(duration=timedelta(seconds=1)))
        second = create_transaction("second")
        second.set_process_event(notification_event(duration=timedelta(seconds=2)))
        third = create_transaction("third")
        third.set_process_event(notification_event(duration=timedelta(milliseconds=1500)))

        assert size_control.should_truncate(first) is False
        assert size_control.should_truncate(second) is False
        assert size_control.should_truncate(third) is True

    def test_actions_tracked_separately(self, size_control, create_transaction, notification_event):
        """Test that different actions do not truncate each other."""
        posts = create_transaction("posts")
        posts.set_process_event(notification_event(duration=timedelta(seconds=3)))
        users = create_transaction("users")
        users.set_process_event(
            notification_event(
                duration=timedelta(seconds=1),
                payload={"controller": "UsersController", "action": "index"},
            )
        )

        assert size_control.should_truncate(posts) is False
        assert size_control.should_truncate(users) is False
        assert len(size_control) == 2

    def test_faulty_subject_to_control(self, size_control, slow_transaction, transaction_with_exception):
        """Test that faulty transactions share the per-action window."""
        assert size_control.should_truncate(slow_transaction) is False
        assert size_control.should_truncate(transaction_with_exception) is True

    def test_reset(self, size_control, create_transaction, notification_event):
        """Test that reset() starts a new window."""
        first = create_transaction("first")
        first.set_process_event(notification_event(duration=timedelta(seconds=3)))
        second = create_transaction("second")
        second.set_process_event(notification_event(duration=timedelta(seconds=1)))

        size_control.should_truncate(first)
        size_control.reset()

        assert len(size_control) == 0
        assert size_control.should_truncate(second) is False
