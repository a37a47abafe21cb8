import pytest


@pytest.fixture
def mock_twilio_client():
    """Mock Twilio client for testing"""
    from unittest.mock import MagicMock, patch

    mock_client = MagicMock()
    mock_message = MagicMock()
    mock_message.sid = "SM1234567890"
    mock_message.status = "queued"
    mock_client.messages.create.return_value = mock_message

    with patch('submissions.channels.whatsapp_handler.Client', return_value=mock_client):
        yield mock_client
