"""Human-readable texts sent to clients."""

INVALID_ROOM_ID = "Invalid room ID."
INVALID_REQUEST = "Invalid request."
ROOM_NOT_FOUND = "This game room does not exist."
NOT_YOUR_TURN = "It is not your turn."
ILLEGAL_MOVE = "Invalid move."
ROOM_FULL = "This room already has two players."
OPPONENT_DISCONNECTED = "Your opponent has disconnected."

STATUS_OK = "Chess server is running."
