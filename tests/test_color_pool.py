from blockwars.systems.color_pool import ColorPool


def test_queue_walks_sequence_and_wraps():
    pool = ColorPool.from_text("0123 45\n2")
    assert pool.numbers == [0, 1, 2, 3, 2]
    drawn = [pool.next_color() for _ in range(6)]
    assert drawn == ["red", "blue", "yellow", "green", "yellow", "red"]


def test_queues_are_independent():
    pool = ColorPool([3, 1, 0])
    assert pool.next_color(queue=0) == "green"
    assert pool.next_color(queue=0) == "blue"
    assert pool.next_color(queue=1) == "green"
    assert pool.next_color(current_index=1, queue=1) == "red"
    assert pool.next_color(queue=1) == "green"
    pool.reset(0)
    assert pool.next_color(queue=0) == "green"


def test_empty_pool_and_numbers_out_of_range():
    pool = ColorPool([7, 9])
    assert len(pool) == 0
    assert pool.random_number() == 0
    assert pool.next_color() == "red"


def test_from_file(tmp_path):
    path = tmp_path / "pool.txt"
    path.write_text("3302", encoding="utf-8")
    pool = ColorPool.from_file(path)
    assert [pool.next_color(queue=5) for _ in range(4)] == ["green", "green", "red", "yellow"]
