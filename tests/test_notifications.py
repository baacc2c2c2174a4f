from datetime import timedelta
from smtplib import SMTPException
from unittest import mock

from django.core import mail
from django.utils import timezone

from apps.bookings.services.booking_service import booking_service
from apps.notifications.models import EmailNotificationLog, Notification
from apps.notifications.services.dispatcher import notification_dispatcher
from apps.notifications.services.email_service import EmailNotificationService
from apps.notifications.tasks import send_booking_reminders_task

NOTIFICATIONS_URL = '/api/v1/notifications/'


def test_booking_notifies_requester_and_agent(make_booking, user, agent):
    booking = make_booking()

    created = notification_dispatcher.notify_booking(booking, 'confirmed')

    assert {n.user_id for n in created} == {user.id, agent.id}
    assert all(n.related_object_type == 'Booking' for n in created)


def test_agent_booking_own_listing_notified_once(make_booking, agent):
    booking = make_booking(user=agent)

    assert len(notification_dispatcher.notify_booking(booking, 'new')) == 1


def test_unknown_booking_kind_is_ignored(make_booking):
    assert notification_dispatcher.notify_booking(make_booking(), 'exploded') == []


def test_property_notification_skips_actor_and_duplicates(listing, agent, user):
    assert notification_dispatcher.notify_property(listing, agent, 'updated') == []

    created = notification_dispatcher.notify_property(listing, user, 'sold')
    assert [n.user_id for n in created] == [agent.id]


def test_booking_emails_sent_to_both_parties(make_booking, user, agent):
    booking = make_booking()

    booking_service._side_effects(booking, 'new')

    recipients = sorted(message.to[0] for message in mail.outbox)
    assert recipients == sorted([user.email, agent.email])
    assert EmailNotificationLog.objects.filter(booking=booking, status='sent').count() == 2


def test_failing_agent_email_does_not_resend_to_requester(make_booking, user, agent):
    booking = make_booking()

    def deliver(**kwargs):
        if kwargs['recipient_list'] == [agent.email]:
            raise SMTPException('mailbox unavailable')
        return 1

    with mock.patch('apps.notifications.services.email_service.send_mail', side_effect=deliver) as send:
        EmailNotificationService.queue_booking_email(booking, 'new')

    recipients = [call.kwargs['recipient_list'][0] for call in send.call_args_list]
    assert recipients.count(user.email) == 1
    assert agent.email in recipients
    assert EmailNotificationLog.objects.filter(booking=booking, recipient_email=user.email, status='sent').count() == 1
    assert not EmailNotificationLog.objects.filter(booking=booking, recipient_email=agent.email, status='sent').exists()


def test_reminders_sent_once(make_booking, user):
    start = timezone.localtime() + timedelta(hours=3)
    booking = make_booking(
        status='confirmed',
        date=start.date(),
        start_time=start.time().replace(microsecond=0),
        end_time=(start + timedelta(minutes=30)).time().replace(microsecond=0),
    )

    assert send_booking_reminders_task() == 1
    assert send_booking_reminders_task() == 0

    booking.refresh_from_db()
    assert booking.reminder_sent
    assert Notification.objects.filter(user=user, notification_type='reminder').count() == 1
    assert [message.to for message in mail.outbox] == [[user.email]]


def test_reminders_skip_far_bookings(make_booking):
    make_booking(status='confirmed')

    assert send_booking_reminders_task() == 0


def test_list_only_own_with_unread_count(auth_client, user, other_user):
    notification_dispatcher.notify_user(user, 'Hello', 'First')
    notification_dispatcher.notify_user(other_user, 'Hello', 'Not yours')

    response = auth_client(user).get(NOTIFICATIONS_URL)

    assert response.status_code == 200
    assert response.data['count'] == 1
    assert response.data['unread_count'] == 1


def test_retrieve_marks_read(auth_client, user):
    notification = notification_dispatcher.notify_user(user, 'Hello', 'First')

    response = auth_client(user).get(f'{NOTIFICATIONS_URL}{notification.id}/')

    notification.refresh_from_db()
    assert response.status_code == 200
    assert notification.is_read
    assert notification.read_at is not None


def test_other_users_notification_not_found(auth_client, user, other_user):
    notification = notification_dispatcher.notify_user(other_user, 'Hello', 'Private')

    assert auth_client(user).get(f'{NOTIFICATIONS_URL}{notification.id}/').status_code == 404


def test_user_cannot_notify_someone_else(auth_client, user, other_user):
    response = auth_client(user).post(NOTIFICATIONS_URL, {
        'user': str(other_user.id), 'title': 'Hi', 'message': 'Spam',
    }, format='json')

    assert response.status_code == 403


def test_admin_can_notify_any_user(auth_client, admin_user, user):
    response = auth_client(admin_user).post(NOTIFICATIONS_URL, {
        'user': str(user.id), 'title': 'Maintenance', 'message': 'Downtime tonight', 'notification_type': 'alert',
    }, format='json')

    assert response.status_code == 201
    assert Notification.objects.get(user=user).notification_type == 'alert'


def test_only_admin_sets_importance(auth_client, user):
    notification = notification_dispatcher.notify_user(user, 'Hello', 'First')

    response = auth_client(user).patch(f'{NOTIFICATIONS_URL}{notification.id}/', {'is_important': True},
                                       format='json')

    assert response.status_code == 403


def test_mark_all_read_and_delete_read(auth_client, user):
    for n in range(3):
        notification_dispatcher.notify_user(user, 'Hello', f'Message {n}')
    client = auth_client(user)

    assert client.patch(f'{NOTIFICATIONS_URL}mark-all-read/').data['count'] == 3
    assert client.get(f'{NOTIFICATIONS_URL}stats/count/').data == {'total': 3, 'unread': 0}
    assert client.delete(f'{NOTIFICATIONS_URL}delete-read/').data['count'] == 3
    assert not Notification.objects.filter(user=user).exists()


def test_summary_groups_by_type(auth_client, user):
    notification_dispatcher.notify_user(user, 'Hello', 'First', notification_type='booking')
    read = notification_dispatcher.notify_user(user, 'Hello', 'Second', notification_type='alert')
    read.mark_read()

    response = auth_client(user).get(f'{NOTIFICATIONS_URL}stats/summary/')

    assert response.data['total'] == 2
    assert response.data['read'] == 1
    assert response.data['by_type']['alert'] == {'total': 1, 'unread': 0}
