"""Shared test fixtures for memscope tests."""

import logging

import pytest

MAIN_RS = """\
use std::collections::HashMap;

const MAX_USERS: usize = 1_000;
static GREETING: &str = "hi";

struct Point {
    x: i32,
    y: i32,
}

enum Shape {
    Empty,
    Circle(f64),
    Rect(i32, i32),
}

fn main() {
    let name = String::from("hello");
    let mut buffer: Vec<u8> = Vec::with_capacity(100);
    // let ignored: [u8; 4096] = [0; 4096];
}
"""

LIB_RS = """\
pub mod shapes;

pub trait Area {
    fn area(&self) -> f64;
}

impl Area for Point {
    fn area(&self) -> f64 {
        0.0
    }
}

pub type Grid = [[u8; 3]; 3];

macro_rules! square {
    ($x:expr) => {
        $x * $x
    };
}
"""

BUILD_OUTPUT_RS = """\
static HUGE: [u8; 1048576] = [0; 1048576];
"""


@pytest.fixture(autouse=True)
def _reset_memscope_logging():
    """Keep handlers installed by setup_logging from leaking between tests."""
    yield
    logger = logging.getLogger("memscope")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def write_rs(tmp_path):
    """Write a Rust source file under tmp_path and return its path."""

    def _write(relative: str, text: str):
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def rust_project(tmp_path, write_rs):
    """Small crate: two source files plus build output under target/."""
    write_rs("src/main.rs", MAIN_RS)
    write_rs("src/lib.rs", LIB_RS)
    write_rs("target/debug/build/out.rs", BUILD_OUTPUT_RS)
    write_rs("README.md", "# not rust\n")
    return tmp_path
