"""
Unit Tests for StorageService
"""
import re
from unittest.mock import MagicMock

from botocore.exceptions import ClientError

from unirecords.services.storage_service import StorageService, UploadedFile, generate_storage_key


def service_with_client() -> StorageService:
    service = StorageService(bucket_name='records-test')
    service._client = MagicMock()
    return service


class TestKeys:

    def test_key_is_sanitized_and_unique(self):
        first = generate_storage_key('leave-documents', 'Medical Cert (final).PDF')
        second = generate_storage_key('leave-documents', 'Medical Cert (final).PDF')

        assert re.fullmatch(r'leave-documents/medical-cert-final-\d+-[0-9a-f]{8}\.pdf', first)
        assert first != second


class TestObjects:

    async def test_upload_sets_content_type(self):
        service = service_with_client()

        key = await service.upload_file(UploadedFile(filename='notes.docx', content=b'PK'), 'exam-materials')

        kwargs = service._client.put_object.call_args.kwargs
        assert kwargs['Bucket'] == 'records-test'
        assert kwargs['Key'] == key
        assert kwargs['ContentType'].endswith('wordprocessingml.document')

    async def test_delete_file(self):
        service = service_with_client()

        assert await service.delete_file('receipts/old.pdf') is True
        service._client.delete_object.assert_called_once_with(Bucket='records-test', Key='receipts/old.pdf')

    async def test_delete_failure_is_reported(self):
        service = service_with_client()
        service._client.delete_object.side_effect = ClientError(
            {'Error': {'Code': 'AccessDenied', 'Message': 'denied'}}, 'DeleteObject'
        )

        assert await service.delete_file('receipts/old.pdf') is False
