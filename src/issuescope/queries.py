"""GraphQL documents used by the issue browser."""

from __future__ import annotations

GET_ISSUES_OF_REPOSITORY = """
query (
  $organization: String!
  $repository: String!
  $cursor: String
  $first: Int!
  $reactionsLast: Int!
) {
  organization(login: $organization) {
    name
    url
    repository(name: $repository) {
      id
      name
      url
      stargazers {
        totalCount
      }
      viewerHasStarred
      issues(first: $first, after: $cursor, states: [OPEN]) {
        edges {
          node {
            id
            title
            url
            reactions(last: $reactionsLast) {
              edges {
                node {
                  id
                  content
                }
              }
            }
          }
        }
        totalCount
        pageInfo {
          endCursor
          hasNextPage
        }
      }
    }
  }
}
"""

ADD_STAR = """
mutation ($repositoryId: ID!) {
  addStar(input: { starrableId: $repositoryId }) {
    starrable {
      viewerHasStarred
    }
  }
}
"""

REMOVE_STAR = """
mutation ($repositoryId: ID!) {
  removeStar(input: { starrableId: $repositoryId }) {
    starrable {
      viewerHasStarred
    }
  }
}
"""

__all__ = ["ADD_STAR", "GET_ISSUES_OF_REPOSITORY", "REMOVE_STAR"]
