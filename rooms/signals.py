# rooms/signals.py

# Import post_save from django.db.models.signals because we need to listen for when a model is saved.
from django.db.models.signals import post_save
# Import receiver from django.dispatch because it's the decorator used to connect a function to a signal.
from django.dispatch import receiver
# Import models from .models because 'Room' is the sender of the signal and 'RoomMember' is what we create.
from .models import Room, RoomMember

"""
This function is a "signal receiver." It automatically runs
every time a new 'Room' is created. Its job is to add the
room's creator to the member list with the 'creator' role, so
the creator can immediately send messages and manage members.
"""
@receiver(post_save, sender=Room)
def add_creator_membership(sender, instance, created, **kwargs):
    if created:
        RoomMember.objects.get_or_create(
            room=instance, user=instance.creator,
            defaults={'role': RoomMember.CREATOR},
        )
