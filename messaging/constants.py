# messaging/constants.py

"""
This file holds the event names used on the WebSocket, so the
consumer, the fanout engine and the HTTP views all agree on
the exact spelling.
RT: Client -> server envelope types first, then every event
type the server pushes down a socket.
"""
# Client -> server
AUTHENTICATE = 'authenticate'
JOIN_ROOM = 'join_room'
LEAVE_ROOM = 'leave_room'
MESSAGE = 'message'
TYPING = 'typing'
CALL = 'call'

# Server -> client
AUTHENTICATED = 'authenticated'
JOINED_ROOM = 'joined_room'
LEFT_ROOM = 'left_room'
NEW_MESSAGE = 'new_message'
MESSAGE_SENT = 'message_sent'
MESSAGE_READ = 'message_read'
CHAT_MESSAGES_READ = 'chat_messages_read'
UPDATE_MESSAGE_STATUS = 'update_message_status'
NOTIFICATION = 'notification'
PRESENCE_UPDATE = 'presence_update'
ERROR = 'error'

# A global group name for broadcasting presence updates (who is online/offline) to everyone.
PRESENCE_GROUP_NAME = 'global_presence'
