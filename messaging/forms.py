# messaging/forms.py

# Import forms from django because this file defines the validation for message payloads.
from django import forms
# Import Message from .models because the allowed message types live on the model.
from .models import Message

# Clients may not author system messages; the server creates those itself
CLIENT_MESSAGE_TYPES = [choice for choice in Message.TYPE_CHOICES if choice[0] != Message.SYSTEM]

"""
This class validates a new message, whether it arrives as a
WebSocket 'message' envelope or as an HTTP POST body. Field
names match the JSON keys the browser sends. It checks that the
message is addressed to exactly one room or one user and that
text messages aren't empty.
RT: Used by the real-time consumer and the message API views.
"""
class MessageForm(forms.Form):
    content = forms.CharField(required=False, strip=False)
    senderId = forms.IntegerField(required=False, min_value=1)
    roomId = forms.IntegerField(required=False, min_value=1)
    recipientId = forms.IntegerField(required=False, min_value=1)
    messageType = forms.ChoiceField(choices=CLIENT_MESSAGE_TYPES, required=False)
    fileId = forms.IntegerField(required=False, min_value=1)
    replyToId = forms.IntegerField(required=False, min_value=1)

    def clean_messageType(self):
        return self.cleaned_data.get('messageType') or Message.TEXT

    def clean(self):
        cleaned_data = super().clean()
        room_id = cleaned_data.get('roomId')
        recipient_id = cleaned_data.get('recipientId')
        if (room_id is None) == (recipient_id is None):
            raise forms.ValidationError('A message needs exactly one of roomId or recipientId.')
        if cleaned_data.get('messageType') == Message.TEXT and not (cleaned_data.get('content') or '').strip():
            raise forms.ValidationError('Text messages cannot be empty.')
        return cleaned_data

    def message_fields(self):
        data = self.cleaned_data
        return {
            'content': data.get('content') or '',
            'room_id': data.get('roomId'),
            'recipient_id': data.get('recipientId'),
            'message_type': data['messageType'],
            'file_id': data.get('fileId'),
            'reply_to_id': data.get('replyToId'),
        }


class AuthenticateForm(forms.Form):
    userId = forms.IntegerField(min_value=1)


class RoomEnvelopeForm(forms.Form):
    roomId = forms.IntegerField(min_value=1)


class TypingForm(forms.Form):
    roomId = forms.IntegerField(min_value=1)
    userId = forms.IntegerField(required=False, min_value=1)
    isTyping = forms.BooleanField(required=False)


class CallForm(forms.Form):
    targetUserId = forms.IntegerField(min_value=1)
