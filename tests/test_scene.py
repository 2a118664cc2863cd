"""Scenario tests for the mirror room frame loop and input handling."""

import random

import pytest
from conftest import aim, run_until
from simulation.entities import GhostRay, Motion
from simulation.geometry import angle_between
from simulation.render import CircleCommand, LineCommand
from simulation.scene import Transition


class TestFrameLoop:
    """Tests for MirrorScene.step."""

    def test_idle_scene_only_animates(self, scene):
        """Without a launch nothing moves but the sight ball pulses."""
        start = scene.particle.position
        for _ in range(10):
            assert scene.step() is None
        assert scene.particle.position == start
        assert scene.sight_ball.animation_phase == pytest.approx(1.5)

    def test_straight_up_hits_diamond_without_reflecting(self, scene):
        """Aiming straight up flies along x=450 and stops on the diamond."""
        aim(scene, 450)
        assert scene.particle.heading == -90

        assert run_until(scene) == Transition.DIAMOND
        assert scene.particle.motion == Motion.IDLE
        assert scene.particle.x == pytest.approx(450)
        assert scene.particle.y == pytest.approx(157)
        assert scene.rays == []
        assert scene.room.diamond.hit is True

    def test_straight_up_reaches_wall(self, clear_scene):
        """With the diamond out of the way the particle stops at the back wall."""
        aim(clear_scene, 450)

        assert run_until(clear_scene) == Transition.WALL
        assert clear_scene.particle.motion == Motion.IDLE
        assert clear_scene.particle.y == pytest.approx(100)
        assert clear_scene.rays == []
        assert clear_scene.ghost_rays == []

    def test_left_mirror_reflection(self, scene):
        """Crossing the left mirror appends one ray and one ghost and flips the heading."""
        aim(scene, 380)
        original = scene.particle.heading
        assert original == pytest.approx(angle_between(450, 325, 380, 305))

        assert run_until(scene) == Transition.REFLECT
        particle = scene.particle
        assert len(scene.rays) == 1
        assert scene.rays[0].p1 == (450, 325)
        assert scene.rays[0].p2 == particle.position
        assert particle.x < 350 < particle.prev_x

        assert len(scene.ghost_rays) == 1
        ghost = scene.ghost_rays[0]
        assert ghost.anchor == particle.position
        assert ghost.heading == original

        assert particle.heading == pytest.approx(180 - original)
        assert particle.origin == particle.position
        assert particle.moving is True

    def test_no_double_bounce_on_same_mirror(self, scene):
        """The step straight after a bounce does not reflect again."""
        aim(scene, 380)
        run_until(scene, Transition.REFLECT)
        heading = scene.particle.heading
        for _ in range(3):
            assert scene.step() is None
        assert scene.particle.heading == heading
        assert len(scene.rays) == 1

    def test_right_mirror_then_wall(self, scene):
        """Aiming right bounces once off the right mirror then stops at the wall."""
        aim(scene, 470)

        assert run_until(scene) == Transition.REFLECT
        assert scene.particle.prev_x < 550 < scene.particle.x
        assert scene.particle.heading == pytest.approx(225)

        assert run_until(scene) == Transition.WALL
        assert scene.particle.motion == Motion.IDLE
        assert len(scene.rays) == 1
        assert len(scene.ghost_rays) == 1
        assert 350 < scene.particle.x < 550

    def test_ghost_rays_advance_in_lockstep(self, scene):
        """Ghost tips travel as far as the particle after their creation."""
        aim(scene, 470)
        run_until(scene, Transition.REFLECT)
        ghost = scene.ghost_rays[0]
        for _ in range(10):
            scene.step()
        travelled = ((ghost.x - ghost.anchor[0]) ** 2 + (ghost.y - ghost.anchor[1]) ** 2) ** 0.5
        assert travelled == pytest.approx(30)

    def test_ghost_rays_stop_with_particle(self, scene):
        """Once the particle is idle ghost rays no longer move."""
        aim(scene, 470)
        run_until(scene, Transition.WALL)
        tip = scene.ghost_rays[0].tip
        for _ in range(5):
            scene.step()
        assert scene.ghost_rays[0].tip == tip

    def test_diamond_marks_every_ghost(self, scene):
        """Striking the diamond flags every existing ghost ray in the same frame."""
        aim(scene, 450)
        scene.ghost_rays.extend([GhostRay(400, 200, -60), GhostRay(500, 200, -120)])

        assert run_until(scene) == Transition.DIAMOND
        assert all(ghost.hit for ghost in scene.ghost_rays)
        assert scene.particle.moving is False
        assert scene.room.diamond.hit is True

    def test_diamond_takes_priority_over_mirror(self, scene):
        """Only the first matching guard fires in a frame."""
        aim(scene, 380)
        particle = scene.particle
        run_until(scene, Transition.REFLECT)
        crossing = particle.position

        # Same flight again, with a tiny diamond sitting on the mirror crossing
        aim(scene, 380)
        diamond = scene.room.diamond
        diamond.x, diamond.y = crossing
        diamond.radius = 1
        assert run_until(scene) == Transition.DIAMOND
        assert particle.position == crossing
        assert scene.rays == []
        assert particle.heading == pytest.approx(angle_between(450, 325, 380, 305))


class TestInput:
    """Tests for drag and release handling."""

    def test_drag_moves_sight_ball_and_clears_trails(self, scene):
        """A drag inside the window moves the ball and erases old rays."""
        aim(scene, 470)
        run_until(scene, Transition.REFLECT)
        assert scene.drag_move(460) is True
        assert scene.sight_ball.x == 460
        assert scene.sight_ball.selected is True
        assert scene.rays == []
        assert scene.ghost_rays == []

    def test_drag_outside_window_is_ignored(self, scene):
        """Out-of-range pointer positions leave the ball where it was."""
        scene.drag_move(460)
        assert scene.drag_move(375) is False
        assert scene.drag_move(900) is False
        assert scene.sight_ball.x == 460

    def test_random_drags_stay_in_window(self, scene):
        """No sequence of drags puts the ball outside the lateral window."""
        rng = random.Random(3)
        for _ in range(500):
            scene.drag_move(rng.uniform(0, 1000))
            assert 375 <= scene.sight_ball.x <= 525

    def test_release_after_drag_launches(self, scene):
        """Release after a drag restarts the particle from the observer."""
        scene.drag_move(470)
        assert scene.drag_end() is True
        assert scene.particle.moving is True
        assert scene.particle.position == (450, 325)
        assert scene.particle.origin == (450, 325)
        assert scene.particle.heading == pytest.approx(-45)
        assert scene.sight_ball.selected is False
        assert scene.sight_ball.moved_since_release is False

    def test_release_without_drag_is_idempotent(self, scene):
        """A bare release only clears the diamond flag."""
        aim(scene, 450)
        scene.ghost_rays.append(GhostRay(400, 200, -60))
        run_until(scene, Transition.DIAMOND)
        position = scene.particle.position

        assert scene.drag_end() is False
        assert scene.room.diamond.hit is False
        assert scene.particle.moving is False
        assert scene.particle.position == position
        assert scene.ghost_rays[0].hit is True

        scene.step()
        assert scene.room.diamond.hit is False
        assert scene.particle.position == position

    def test_drag_outside_window_then_release_does_nothing(self, scene):
        """A drag that never entered the window does not launch."""
        scene.drag_move(10)
        assert scene.drag_end() is False
        assert scene.particle.moving is False


class TestRenderList:
    """Tests for the render list."""

    def test_trail_drawn_first_when_resting(self, scene):
        """The live trail is the bottom-most command."""
        aim(scene, 470)
        scene.step()
        commands = scene.render_list()
        first = commands[0]
        assert isinstance(first, LineCommand)
        assert first.p1 == scene.particle.origin
        assert first.p2 == scene.particle.position

    def test_trail_hidden_while_dragging(self, scene):
        """No trail while the sight ball is selected."""
        resting = len(scene.render_list())
        scene.drag_move(470)
        assert len(scene.render_list()) == resting - 1

    def test_sight_ball_drawn_last(self, scene):
        """Solid shapes end the list, sight ball on top."""
        commands = scene.render_list()
        assert isinstance(commands[-1], CircleCommand)
        assert commands[-1].center == scene.sight_ball.position
        assert commands[-1].diameter == scene.sight_ball.size

    def test_ghost_hit_marker(self, scene):
        """A hit ghost ray adds a circle at its tip."""
        aim(scene, 450)
        scene.ghost_rays.append(GhostRay(400, 200, -60))
        before = len(scene.render_list())
        run_until(scene, Transition.DIAMOND)
        commands = scene.render_list()
        assert len(commands) == before + 1
        markers = [c for c in commands if isinstance(c, CircleCommand) and c.center == scene.ghost_rays[0].tip]
        assert len(markers) == 1

    def test_commands_serialize(self, scene):
        """Every command has a kind tag."""
        kinds = {command.to_dict()["kind"] for command in scene.render_list()}
        assert kinds == {"line", "circle"}
