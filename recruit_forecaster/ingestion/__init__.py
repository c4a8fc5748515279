"""
Ingestion layer — where posting histories come from.

Submodules:
  classifiers       — keyword tables for duty, employment type and region
  history           — JobRecord + build_histories() (filtering boundary)
  postings_csv      — CSV reader/writer for JobRecord files
  publicdata_client — data.go.kr recruitment API client (httpx)

Credential placement (.env, gitignored):
  PUBLIC_DATA_API_KEY — data.go.kr service key
"""
