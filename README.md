# mazefps

This package holds the networking and game-state core of a small multiplayer
maze shooter. Players join a UDP server by name. When the chosen number of
players has joined, the server tells each player where it starts and where
its enemies are. From then on it relays position updates and the list of
players who have been shot.

## Installation

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running a server

```
mazefps-server
```

The server first asks how many players to wait for.

- Pressing Enter, or typing anything that is not a number, gives the
  default of 2.
- Any number above 10 is refused, because the maze has only ten spawn
  points.

The server listens on port 8080. It binds to the address of the interface
that routes to the internet, or to `0.0.0.0` if that address cannot be found,
and prints the address it listens on.

Before it handles each incoming datagram, the server sends every connected
client the list of players known to be dead.

Some messages cannot be handled: a name that is empty or already taken, a
lobby that is full, or a datagram that does not decode. These are reported on
stderr and the server carries on. Anything else it cannot handle stops the
server. That includes a `Leave` message and an update from an address that
never joined.

## Joining a game

```
mazefps-client
```

The client asks for your name and for the server address. The address is
written as `ip:port` or `[ipv6]:port`; if you leave it empty, this machine's
address on port 8080 is used.

The client sends a `Join` message and waits up to five seconds for any reply.
It then blocks until the server sends `StartGame`. At that point it prints
your starting position and the position of each enemy, and exits.

## What the package does not do

There is no game window. The package does not render the maze, the players
or the minimap, and it plays no sound. Once the game has started,
`mazefps-client` does not go on to send or receive updates. The state,
movement and layout functions below are the maths such a front end would call
each frame. They are not driven by anything in the package.

## Library overview

### `mazefps.protocol`

The wire messages and their binary encoding:

- Messages: `Join`, `PlayerUpdateSending`, `PlayerUpdateReceiving`,
  `StartGame` (with `CommonPlayer` entries), `DeadPlayer`, `Leave`.
- Game-state message: `PlayerUpdate`.
- Functions: `encode_message`, `decode_message`, `encode_game_message` and
  `decode_game_message`.

Malformed input raises `DecodeError`.

### `mazefps.vecmath`

`Vec3` and `Quat`, used for positions and orientations.

- `Vec3` provides `length`, `normalize_or_zero` and `lerp`.
- `Quat` provides `from_rotation_y`, `from_euler_yxz`, `to_euler_yxz`,
  `rotate`, `forward` and `right`.

### `mazefps.server`

- `Server` handles the lobby and relays updates. Its methods include
  `handle_join`, `handle_datagram`, `broadcast` and `run`. It takes an
  optional `send` callable, so it can be used without a socket.
- `parse_player_count` reads the number of players to wait for.
- `start_server` asks for that number and runs the server.
- `main` is the entry point of `mazefps-server`.

### `mazefps.client`

- `Client.connect` performs the join handshake and returns the socket.
- `NetworkResource` is a socket with a queue of outgoing messages.
- `parse_server_address` reads a server address.
- `input_connexion` asks for the name and the server address.
- `wait_for_start` blocks until `StartGame` arrives.
- `main` is the entry point of `mazefps-client`.

### `mazefps.state`

Client-side state:

- `EnemyResource`, `Enemy`, `EnemyMovement`, `PlayerResource` and
  `MazeResource`.
- Enemy animation choice: `EnemyState`, `animation_index`,
  `next_enemy_state` and `AnimationTracker`.
- Rate limiting of outgoing updates: `UpdateThrottle`.
- `build_player_update` builds the outgoing update message.

### `mazefps.motion`

Movement and camera maths:

- `lerp` and `step_enemy` interpolate enemy positions.
- `rotate_player` and `CameraSensitivity` handle mouse-look.
- `move_direction` turns arrow-key input into a movement step.
- `minimap_position` places the player's marker on the minimap.

### `mazefps.layout`

Maze geometry:

- `parse_maze` reads a JSON grid.
- `light_positions`, `floor_size` and `wall_positions` place the 3D scene.
- `minimap_tiles` and `tile_color` lay out the minimap.

### `mazefps.errors`

Server errors are subclasses of `ServerError`: `ServerConnectionError`,
`InvalidClientError` and `InvalidMessageError`. Client errors are subclasses
of `ClientError`: `ConnectionTimeoutError` and `ServerNotRespondingError`.