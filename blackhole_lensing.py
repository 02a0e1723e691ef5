from __future__ import annotations

"""
Interactive Schwarzschild black hole viewer.

Builds the outcome table once, then renders a frame per loop iteration on the
CPU and presents it through a fullscreen textured quad. Moving the mouse turns
the camera; ESC quits.
"""

import ctypes
import logging
import sys
import time
from dataclasses import dataclass
from typing import Optional, Sequence

import glfw
import numpy as np
from OpenGL import GL as gl  # GL API (functions/constants)
from OpenGL.GL.shaders import compileProgram, compileShader

from lensing_config import ViewerConfig, parse_args
from lensing_scene import LensingScene
from pixel_buffer import PixelBuffer
from utilities import MathUtils, SystemUtils


@dataclass
class Engine:
    """glfw window that shows rendered pixel buffers."""

    # Window dimensions in pixels
    window_width: int = 1600
    window_height: int = 1200

    # GPU resources
    quad_vao: Optional[int] = None
    quad_vbo: Optional[int] = None
    texture: Optional[int] = None
    shader_program: Optional[int] = None

    # "Effective" mouse position, a smoothed version of the physical cursor
    mouse_x: float = 0.0
    mouse_y: float = 0.0
    cursor_x: float = 0.0
    cursor_y: float = 0.0
    mouse_smoothing: float = 0.25

    window: Optional[object] = None

    def __init__(self, width: int, height: int, mouse_smoothing: float = 0.25) -> None:
        """Initialize GLFW window and OpenGL context."""
        logger = logging.getLogger("lensing.engine")
        self.window_width = width
        self.window_height = height
        self.mouse_smoothing = mouse_smoothing
        self.mouse_x = self.cursor_x = width / 2.0
        self.mouse_y = self.cursor_y = height / 2.0

        if not glfw.init():
            logger.error("Failed to initialize GLFW")
            raise RuntimeError("GLFW initialization failed")

        glfw.window_hint(glfw.CONTEXT_VERSION_MAJOR, 3)
        glfw.window_hint(glfw.CONTEXT_VERSION_MINOR, 3)
        glfw.window_hint(glfw.OPENGL_PROFILE, glfw.OPENGL_CORE_PROFILE)
        # This is for forward compatibility especially for mac
        glfw.window_hint(glfw.OPENGL_FORWARD_COMPAT, glfw.TRUE)
        glfw.window_hint(glfw.RESIZABLE, glfw.FALSE)

        self.window = glfw.create_window(
            width, height, "Schwarzschild black hole visualizer", None, None
        )
        if not self.window:
            logger.error("Failed to create GLFW window")
            glfw.terminate()
            raise RuntimeError("GLFW window creation failed")

        glfw.make_context_current(self.window)
        glfw.swap_interval(1)  # enable vsync if available

        fb_width, fb_height = glfw.get_framebuffer_size(self.window)
        gl.glViewport(0, 0, fb_width, fb_height)
        gl.glClearColor(0.0, 0.0, 0.0, 1.0)

        glfw.set_key_callback(self.window, self.on_key)
        glfw.set_cursor_pos_callback(self.window, self.on_cursor_pos)

        self.shader_program = self._create_shader_program()
        self._initialize_quad()

        logger.info("Created window %dx%d px", width, height)

    def on_key(self, window, key, scancode, action, mods) -> None:
        """Handle keyboard input - ESC to close."""
        if key == glfw.KEY_ESCAPE and action == glfw.PRESS:
            glfw.set_window_should_close(window, True)

    def on_cursor_pos(self, window, xpos: float, ypos: float) -> None:
        self.cursor_x = xpos
        self.cursor_y = ypos

    def update_mouse(self) -> None:
        """Move the effective mouse position part of the way toward the cursor."""
        self.mouse_x = MathUtils.lerp(self.mouse_x, self.cursor_x, self.mouse_smoothing)
        self.mouse_y = MathUtils.lerp(self.mouse_y, self.cursor_y, self.mouse_smoothing)

    def _create_shader_program(self) -> int:
        """Create basic vertex/fragment shader program for fullscreen quad."""
        vertex_source = """
        #version 330 core
        layout (location = 0) in vec2 aPos;
        layout (location = 1) in vec2 aTexCoord;
        out vec2 TexCoord;
        void main() {
            gl_Position = vec4(aPos, 0.0, 1.0);
            TexCoord = aTexCoord;
        }
        """

        # Rendered pixels carry alpha 0, so only the colour is used
        fragment_source = """
        #version 330 core
        in vec2 TexCoord;
        out vec4 FragColor;
        uniform sampler2D screenTexture;
        void main() {
            FragColor = vec4(texture(screenTexture, TexCoord).rgb, 1.0);
        }
        """

        vertex_shader = compileShader(vertex_source, gl.GL_VERTEX_SHADER)
        fragment_shader = compileShader(fragment_source, gl.GL_FRAGMENT_SHADER)
        program = compileProgram(vertex_shader, fragment_shader)
        gl.glDeleteShader(vertex_shader)
        gl.glDeleteShader(fragment_shader)

        return program

    def _initialize_quad(self) -> None:
        """Initialize fullscreen quad and the texture frames are uploaded to."""
        # Buffer row 0 is the top of the screen, so v runs downward
        quad_vertices = np.array([
            # positions    # texCoords
            -1.0,  1.0,    0.0, 0.0,  # top left
            -1.0, -1.0,    0.0, 1.0,  # bottom left
             1.0, -1.0,    1.0, 1.0,  # bottom right
            -1.0,  1.0,    0.0, 0.0,  # top left
             1.0, -1.0,    1.0, 1.0,  # bottom right
             1.0,  1.0,    1.0, 0.0   # top right
        ], dtype=np.float32)

        self.quad_vao = gl.glGenVertexArrays(1)
        self.quad_vbo = gl.glGenBuffers(1)

        gl.glBindVertexArray(self.quad_vao)
        gl.glBindBuffer(gl.GL_ARRAY_BUFFER, self.quad_vbo)
        gl.glBufferData(gl.GL_ARRAY_BUFFER, quad_vertices.nbytes, quad_vertices, gl.GL_STATIC_DRAW)

        # Position attribute (location = 0)
        gl.glVertexAttribPointer(0, 2, gl.GL_FLOAT, gl.GL_FALSE, 4 * 4, None)
        gl.glEnableVertexAttribArray(0)

        # Texture coordinate attribute (location = 1)
        gl.glVertexAttribPointer(1, 2, gl.GL_FLOAT, gl.GL_FALSE, 4 * 4, ctypes.c_void_p(2 * 4))
        gl.glEnableVertexAttribArray(1)

        self.texture = gl.glGenTextures(1)
        gl.glBindTexture(gl.GL_TEXTURE_2D, self.texture)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MIN_FILTER, gl.GL_NEAREST)
        gl.glTexParameteri(gl.GL_TEXTURE_2D, gl.GL_TEXTURE_MAG_FILTER, gl.GL_NEAREST)
        gl.glTexImage2D(gl.GL_TEXTURE_2D, 0, gl.GL_RGBA8, self.window_width,
                        self.window_height, 0, gl.GL_BGRA, gl.GL_UNSIGNED_BYTE, None)

        gl.glBindVertexArray(0)

    def present(self, buffer: PixelBuffer) -> None:
        """Upload a rendered frame and draw it."""
        gl.glBindTexture(gl.GL_TEXTURE_2D, self.texture)
        # The pixel bytes are B, G, R, A in memory
        gl.glPixelStorei(gl.GL_UNPACK_ROW_LENGTH, buffer.stride)
        gl.glTexSubImage2D(gl.GL_TEXTURE_2D, 0, 0, 0, buffer.width, buffer.height,
                           gl.GL_BGRA, gl.GL_UNSIGNED_BYTE, buffer.data.view(np.uint8))
        gl.glPixelStorei(gl.GL_UNPACK_ROW_LENGTH, 0)

        gl.glClear(gl.GL_COLOR_BUFFER_BIT)
        gl.glUseProgram(self.shader_program)
        gl.glBindVertexArray(self.quad_vao)
        gl.glActiveTexture(gl.GL_TEXTURE0)
        gl.glUniform1i(gl.glGetUniformLocation(self.shader_program, "screenTexture"), 0)
        gl.glDrawArrays(gl.GL_TRIANGLES, 0, 6)
        glfw.swap_buffers(self.window)

    def run(self, scene: LensingScene, show_fps: bool = False, fps_interval: int = 100) -> None:
        """Main loop: smooth the mouse, render, present, poll events."""
        logger = logging.getLogger("lensing.engine")
        logger.info("Starting main loop (window: %dx%d px)", self.window_width, self.window_height)
        assert self.window is not None

        buffer = PixelBuffer.allocate(self.window_width, self.window_height)
        frames = 0
        start_time = time.perf_counter()
        while not glfw.window_should_close(self.window):
            self.update_mouse()

            frames += 1
            if show_fps and frames == fps_interval:
                elapsed = time.perf_counter() - start_time
                logger.info("%d frames in %dms = %.2f fps",
                            frames, int(elapsed * 1000), frames / elapsed)
                frames = 0
                start_time = time.perf_counter()

            scene.render(buffer, self.mouse_x, self.mouse_y)
            self.present(buffer)
            glfw.poll_events()
        logger.info("Window closed")

    def shutdown(self) -> None:
        """Clean up GL and GLFW resources."""
        if self.window is not None:
            if self.quad_vbo is not None:
                gl.glDeleteBuffers(1, [self.quad_vbo])
            if self.quad_vao is not None:
                gl.glDeleteVertexArrays(1, [self.quad_vao])
            if self.texture is not None:
                gl.glDeleteTextures(1, [self.texture])
            if self.shader_program is not None:
                gl.glDeleteProgram(self.shader_program)
            glfw.destroy_window(self.window)
        glfw.terminate()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the viewer."""
    viewer: ViewerConfig = parse_args(argv)
    SystemUtils.configure_logging(viewer.log_level)
    logger = logging.getLogger("lensing")
    logger.info("Dependency versions: %s", SystemUtils.get_dependency_versions())

    try:
        scene = LensingScene.from_viewer_config(viewer)
    except RuntimeError as exc:
        logger.error("%s", exc)
        return 1

    if viewer.output:
        # Same view as the first frame of the window
        scene.snapshot(viewer.output, viewer.width, viewer.height,
                       viewer.width / 2.0, viewer.height / 2.0)
        return 0

    engine = Engine(viewer.width, viewer.height, viewer.mouse_smoothing)
    try:
        engine.run(scene, viewer.show_fps, viewer.fps_interval)
    finally:
        engine.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
