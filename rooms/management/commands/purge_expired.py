# rooms/management/commands/purge_expired.py

# Import BaseCommand from django.core.management.base because custom management commands are based on it.
from django.core.management.base import BaseCommand
# Import timezone from django.utils because we need to get the current time.
from django.utils import timezone
# Import the models because this command flags expired messages, files and statuses.
from accounts.models import Status
# Import Message from messaging.models because expired messages are purged too.
from messaging.models import Message
# Import SharedFile from rooms.models because expired files are purged.
from rooms.models import SharedFile

"""
This class defines a custom command that can be run from the
server's command line (using 'python manage.py purge_expired').
Messages, shared files and status posts can carry an expiry
time. This command finds everything whose expiry time has
passed and flags it as deleted, so it drops out of history,
file lists and the status feed. Rows are kept, so replies and
file messages that point at them don't break.
"""
class Command(BaseCommand):
    help = 'Flags expired messages, shared files and statuses as deleted.'

    def handle(self, *args, **kwargs):
        now = timezone.now()

        messages = Message.objects.filter(is_deleted=False, expires_at__lte=now).update(
            is_deleted=True, deleted_at=now,
        )
        files = SharedFile.objects.filter(is_deleted=False, expires_at__lte=now).update(
            is_deleted=True, deleted_at=now,
        )
        statuses = Status.objects.filter(is_deleted=False, expires_at__lte=now).update(is_deleted=True)

        total = messages + files + statuses
        if total > 0:
            self.stdout.write(self.style.SUCCESS(
                f'Purged {messages} message(s), {files} file(s) and {statuses} status(es).'
            ))
        else:
            self.stdout.write(self.style.SUCCESS('Nothing has expired.'))
