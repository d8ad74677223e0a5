import numpy as np
import cv2
from unittest.mock import patch

from roitracker.core.entities import PointerEvent, PointerKind
from roitracker.services.display import OpenCVDisplay, to_pointer_event


def test_mouse_events_map_to_pointer_events():
    assert to_pointer_event(cv2.EVENT_LBUTTONDOWN, 3, 4) == PointerEvent(PointerKind.DOWN, 3, 4)
    assert to_pointer_event(cv2.EVENT_MOUSEMOVE, 5, 6) == PointerEvent(PointerKind.MOVE, 5, 6)
    assert to_pointer_event(cv2.EVENT_LBUTTONUP, 7, 8) == PointerEvent(PointerKind.UP, 7, 8)
    assert to_pointer_event(cv2.EVENT_RBUTTONDOWN, 1, 1) is None


@patch('cv2.setMouseCallback')
@patch('cv2.namedWindow')
def test_pointer_handler_receives_translated_events(mock_named_window, mock_set_callback):
    received = []
    display = OpenCVDisplay("win")
    display.attach_pointer_handler(received.append)

    window, callback = mock_set_callback.call_args[0]
    callback(cv2.EVENT_LBUTTONDOWN, 10, 20, 0, None)
    callback(cv2.EVENT_RBUTTONDOWN, 10, 20, 0, None)

    assert window == "win"
    assert received == [PointerEvent(PointerKind.DOWN, 10, 20)]
    mock_named_window.assert_called_once()


@patch('cv2.waitKey', return_value=ord('q'))
@patch('cv2.imshow')
@patch('cv2.namedWindow')
def test_present_shows_image_and_returns_key(mock_named_window, mock_imshow, mock_wait_key):
    image = np.zeros((2, 2, 3), np.uint8)
    display = OpenCVDisplay("win", delay_ms=5)

    assert display.present(image) == ord('q')
    mock_imshow.assert_called_once_with("win", image)
    mock_wait_key.assert_called_once_with(5)


@patch('cv2.destroyWindow')
@patch('cv2.namedWindow')
def test_close_destroys_window_once(mock_named_window, mock_destroy):
    display = OpenCVDisplay("win")
    display.open()
    display.close()
    display.close()
    mock_destroy.assert_called_once_with("win")


@patch('cv2.destroyWindow')
@patch('cv2.imshow')
@patch('cv2.namedWindow')
def test_reference_patch_window_shown_and_closed(mock_named_window, mock_imshow, mock_destroy):
    patch_image = np.zeros((8, 8, 3), np.uint8)
    display = OpenCVDisplay("win")
    display.open()

    display.show_patch(patch_image)
    display.show_patch(patch_image)
    display.close()

    mock_imshow.assert_called_with("win - reference", patch_image)
    assert mock_named_window.call_count == 2
    mock_destroy.assert_any_call("win - reference")
    mock_destroy.assert_any_call("win")
    assert mock_destroy.call_count == 2
