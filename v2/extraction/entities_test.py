"""Tests for the token entity model."""

from extraction.entities import Point, Token, coerce_token


class TestTokenFromDict:
    def test_full(self):
        token = Token.from_dict(
            {
                "id": "goblin",
                "name": "Goblin",
                "x": 100,
                "y": 200,
                "width": 50,
                "height": 50,
                "elevation": 5,
                "movementAction": "fly",
                "traits": ["humanoid", 3],
                "conditions": ["invisible"],
                "feats": ["petal-step"],
                "flags": {"concealment": True},
            }
        )
        assert token is not None
        assert token.id == "goblin"
        assert token.center == Point(125, 225, 5)
        assert token.movement_action == "fly"
        assert token.traits == ["humanoid"]
        assert token.has_condition("invisible")
        assert token.flags == {"concealment": True}

    def test_defaults(self):
        token = Token.from_dict({"id": "a", "x": 0, "y": 0})
        assert token == Token(id="a", x=0, y=0)
        assert token.center == Point(50, 50, 0)

    def test_missing_id(self):
        assert Token.from_dict({"x": 0, "y": 0}) is None

    def test_missing_position(self):
        assert Token.from_dict({"id": "a", "x": 0}) is None

    def test_non_finite_position(self):
        assert Token.from_dict({"id": "a", "x": float("nan"), "y": 0}) is None

    def test_not_a_dict(self):
        assert Token.from_dict(None) is None
        assert Token.from_dict("goblin") is None

    def test_round_trip(self):
        token = Token(id="a", x=1, y=2, traits=["undead"], feats=["x"])
        assert Token.from_dict(token.to_dict()) == token


class TestCoerceToken:
    def test_token_passes_through(self):
        token = Token(id="a", x=0, y=0)
        assert coerce_token(token) is token

    def test_dict(self):
        assert coerce_token({"id": "a", "x": 0, "y": 0}) == Token(
            id="a", x=0, y=0
        )

    def test_empty_id_token(self):
        assert coerce_token(Token(id="", x=0, y=0)) is None

    def test_other(self):
        assert coerce_token(42) is None
